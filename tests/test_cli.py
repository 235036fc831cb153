from __future__ import annotations

import json

import pytest

import scripts.deploy_staking as staking_cli
import scripts.deploy_token as token_cli

KEY = "0x" + "11" * 32
STAKE = "0x1111111111111111111111111111111111111111"
REWARD = "0x2222222222222222222222222222222222222222"


@pytest.fixture(autouse=True)
def network_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("RPC_URL", "http://localhost:8545")
    monkeypatch.setenv("PRIVATE_KEY", KEY)
    monkeypatch.setattr("deploy_pipeline.config.load_dotenv", lambda: False)
    monkeypatch.setattr(staking_cli, "load_dotenv", lambda: False)


def test_deploy_token_reports_units_and_role_grant(monkeypatch, capsys, ledger_factory):
    ledger = ledger_factory(addresses=["0xA1", "0xA2"])
    captured = {}

    def factory(config):
        captured["config"] = config
        return ledger

    monkeypatch.setattr(token_cli, "build_client", factory)

    assert token_cli.main(["--confirmations", "2", "--log-level", "WARNING"]) == 0

    lines = capsys.readouterr().out.strip().splitlines()
    assert lines[:2] == ["MyToken deployed to: 0xA1", "TokenMinter deployed to: 0xA2"]
    assert lines[2].startswith("grantRole on MyToken confirmed: 0x")
    assert captured["config"].confirmations == 2
    assert ledger.calls_named("deploy")[1] == ("deploy", "TokenMinter", ["0xA1"])


def test_deploy_token_failure_exits_non_zero(monkeypatch, capsys, ledger_factory):
    from deploy_pipeline.errors import TransactionReverted

    ledger = ledger_factory(failures={"0xc0003": TransactionReverted("0xc0003")})
    monkeypatch.setattr(token_cli, "build_client", lambda config: ledger)

    assert token_cli.main(["--log-level", "ERROR"]) == 1

    captured = capsys.readouterr()
    assert "MyToken deployed to:" in captured.out
    assert "TransactionReverted: Transaction 0xc0003 reverted" in captured.err


def test_deploy_token_json_output(monkeypatch, capsys, ledger_factory):
    monkeypatch.setattr(token_cli, "build_client", lambda config: ledger_factory(addresses=["0xA1", "0xA2"]))

    assert token_cli.main(["--json", "--log-level", "ERROR"]) == 0

    payload = json.loads(capsys.readouterr().out)
    assert [unit["key"] for unit in payload["units"]] == ["MyToken", "TokenMinter"]
    assert payload["actions"][0]["method"] == "grantRole"


def test_deploy_staking_passes_token_addresses(monkeypatch, capsys, ledger_factory):
    ledger = ledger_factory(addresses=["0xS"])
    monkeypatch.setattr(staking_cli, "build_client", lambda config: ledger)

    status = staking_cli.main(["--staking-token", STAKE, "--reward-token", REWARD, "--log-level", "ERROR"])

    assert status == 0
    assert ledger.calls_named("deploy") == [("deploy", "Staking", [STAKE, REWARD])]
    assert ledger.calls_named("invoke") == []
    assert capsys.readouterr().out.strip() == "Staking deployed to: 0xS"


def test_deploy_staking_reads_addresses_from_environment(monkeypatch, ledger_factory):
    monkeypatch.setenv("STAKING_TOKEN_ADDR", STAKE)
    monkeypatch.setenv("REWARD_TOKEN_ADDR", REWARD)
    ledger = ledger_factory()
    monkeypatch.setattr(staking_cli, "build_client", lambda config: ledger)

    assert staking_cli.main(["--log-level", "ERROR"]) == 0
    assert ledger.calls_named("deploy")[0][2] == [STAKE, REWARD]


def test_deploy_staking_without_addresses_fails_before_connecting(monkeypatch, capsys):
    monkeypatch.delenv("STAKING_TOKEN_ADDR", raising=False)
    monkeypatch.delenv("REWARD_TOKEN_ADDR", raising=False)

    def factory(config):
        raise AssertionError("client must not be built")

    monkeypatch.setattr(staking_cli, "build_client", factory)

    assert staking_cli.main(["--log-level", "ERROR"]) == 1
    assert "STAKING_TOKEN_ADDR" in capsys.readouterr().err


def test_missing_private_key_exits_non_zero(monkeypatch, capsys):
    monkeypatch.delenv("PRIVATE_KEY")

    assert token_cli.main(["--log-level", "ERROR"]) == 1
    assert capsys.readouterr().err.startswith("NoSignerAvailable:")
