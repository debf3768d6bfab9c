import functools

import click
import pytest
from ape.exceptions import ApeException, ContractLogicError

from flashvotes import cli
from flashvotes.constants import AUCTION, GOERLI, QUESTIONS, VOTES
from flashvotes.orchestrator import Outcome
from flashvotes.params import Deployer
from flashvotes.verify import VerificationStatus, Verifier


@pytest.fixture(autouse=True)
def offline(monkeypatch, fake_chain, explorer):
    """Runs the scripts' entry point against the fake chain and explorer."""
    monkeypatch.setattr(cli, "check_plugins", lambda verify=True: None)
    monkeypatch.setattr(cli, "active_network_id", lambda: GOERLI)
    monkeypatch.setattr(cli, "_print_deployment_info", lambda *args, **kwargs: None)
    monkeypatch.setattr(
        Verifier, "from_provider", lambda enabled=True: Verifier(explorer, enabled=enabled)
    )
    monkeypatch.setattr(
        cli, "Deployer", functools.partial(Deployer, get_container=fake_chain.get_container)
    )


def _run(account, **kwargs):
    return cli.run_deployment(account=account, verify=True, autosign=True, **kwargs)


def test_successful_run_returns_the_report(deployer_account, fake_chain, capsys):
    report = _run(deployer_account)

    assert report.outcome is Outcome.SUCCESS
    assert set(report.live) == {VOTES, AUCTION, QUESTIONS}
    assert "SUCCESS" in capsys.readouterr().out


def test_verification_failure_exits_normally(deployer_account, fake_chain, explorer, capsys):
    auction_address = "0x0000000000000000000000000000000000001001"  # second deployment
    explorer.failures[auction_address] = ApeException("rate limited")

    report = _run(deployer_account)

    assert report.outcome is Outcome.SUCCESS
    assert report.rows[AUCTION].verification is VerificationStatus.FAILED
    assert "SUCCESS" in capsys.readouterr().out


def test_auction_failure_exits_non_zero(deployer_account, fake_chain, capsys):
    fake_chain.failures[AUCTION] = ContractLogicError("reverted")

    with pytest.raises(click.exceptions.Exit) as error:
        _run(deployer_account)

    assert error.value.exit_code == 1
    captured = capsys.readouterr()
    votes = fake_chain.deployments_of(VOTES)[0]
    assert "PARTIAL" in captured.out
    assert votes.address in captured.out
    assert "Deployment failed" in captured.err
    assert "deploy-auction" in captured.err


def test_declined_prompt_still_reports_live_contracts(deployer_account, fake_chain, capsys):
    fake_chain.failures["grantRole"] = SystemExit(-1)

    with pytest.raises(SystemExit):
        _run(deployer_account)

    output = capsys.readouterr().out
    for deployment in fake_chain.deployments:
        assert deployment.address in output
    assert "grant-role" in output


def test_unsupported_locations_is_a_usage_error(deployer_account, fake_chain):
    with pytest.raises(click.ClickException):
        _run(deployer_account, locations="mainnet")

    assert fake_chain.deployments == []
