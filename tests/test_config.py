"""
Unit Tests for configuration and confirmation policy
"""

import json
import pytest
from hypothesis import given, strategies as st

from deployer.config import build_network_settings, build_settings, load_config, resolve_rpc_url
from deployer.confirmations import ConfirmationPolicy
from deployer.exceptions import ConfigError, UnknownNetworkError


def write_config(tmp_path, **overrides):
    config = {
        'contract': {
            'artifact_path': 'artifacts/contracts/CertiProofNFT.sol/CertiProofNFT.json',
            'name': 'CertiProof X',
            'symbol': 'CERTX',
            'version': '1.0.0',
            'author': 'Kai Zenjiro (0xGenesis)',
            'contact': 'certiproofx@protonmail.me',
        },
        'confirmations': {'default': 2, 'overrides': {'1': 5, '137': 5}},
        'networks': {
            'localhost': {'chain_id': 31337, 'rpc_url': 'http://127.0.0.1:8545'},
            'polygon': {
                'chain_id': 137,
                'rpc_url_env': 'POLYGON_RPC_URL',
                'rpc_url': 'https://polygon-mainnet.g.alchemy.com/v2/${ALCHEMY_API_KEY}',
                'gas_price_gwei': 40,
                'explorer_url': 'https://polygonscan.com',
            },
        },
    }
    config.update(overrides)
    path = tmp_path / 'deploy_config.json'
    path.write_text(json.dumps(config))
    return str(path)


class TestConfirmationPolicy:
    """Test the confirmation table"""

    def test_default_table(self):
        policy = ConfirmationPolicy()

        assert policy.required_confirmations(1) == 5
        assert policy.required_confirmations(137) == 5
        assert policy.required_confirmations(80001) == 2
        assert policy.required_confirmations(31337) == 2

    @given(chain_id=st.integers(min_value=0, max_value=2 ** 32).filter(lambda c: c not in (1, 137)))
    def test_unlisted_chains_use_default(self, chain_id):
        assert ConfirmationPolicy().required_confirmations(chain_id) == 2

    def test_from_config_converts_string_keys(self):
        policy = ConfirmationPolicy.from_config({'default': 3, 'overrides': {'1': 12, '42161': 4}})

        assert policy.required_confirmations(1) == 12
        assert policy.required_confirmations(42161) == 4
        assert policy.required_confirmations(137) == 3

    def test_from_config_without_overrides_keeps_builtin_table(self):
        policy = ConfirmationPolicy.from_config({'default': 3})

        assert policy.required_confirmations(137) == 5
        assert policy.required_confirmations(5) == 3

    def test_empty_config(self):
        policy = ConfirmationPolicy.from_config({})

        assert policy.required_confirmations(1) == 5

    @pytest.mark.parametrize('overrides,default', [({}, 0), ({1: 0}, 2)])
    def test_rejects_zero_confirmations(self, overrides, default):
        with pytest.raises(ValueError):
            ConfirmationPolicy(overrides, default)


class TestRpcUrl:
    """Test RPC URL resolution"""

    def test_env_variable_wins(self, monkeypatch):
        monkeypatch.setenv('POLYGON_RPC_URL', 'https://rpc.example.com')

        url = resolve_rpc_url('polygon', {'rpc_url_env': 'POLYGON_RPC_URL', 'rpc_url': 'http://other'})

        assert url == 'https://rpc.example.com'

    def test_template_expanded(self, monkeypatch):
        monkeypatch.delenv('POLYGON_RPC_URL', raising=False)
        monkeypatch.setenv('ALCHEMY_API_KEY', 'secret')

        url = resolve_rpc_url('polygon', {
            'rpc_url_env': 'POLYGON_RPC_URL',
            'rpc_url': 'https://polygon-mainnet.g.alchemy.com/v2/${ALCHEMY_API_KEY}',
        })

        assert url == 'https://polygon-mainnet.g.alchemy.com/v2/secret'

    def test_unresolved_variable(self, monkeypatch):
        monkeypatch.delenv('ALCHEMY_API_KEY', raising=False)

        with pytest.raises(ConfigError):
            resolve_rpc_url('polygon', {'rpc_url': 'https://x/v2/${ALCHEMY_API_KEY}'})

    def test_no_url(self, monkeypatch):
        monkeypatch.delenv('MUMBAI_RPC_URL', raising=False)

        with pytest.raises(ConfigError):
            resolve_rpc_url('mumbai', {'rpc_url_env': 'MUMBAI_RPC_URL'})


class TestBuildSettings:
    """Test settings assembly"""

    def test_builds_network_and_contract(self, tmp_path, monkeypatch):
        monkeypatch.setenv('POLYGON_RPC_URL', 'https://rpc.example.com')

        settings = build_settings('polygon', write_config(tmp_path))

        assert settings.network.name == 'polygon'
        assert settings.network.chain_id == 137
        assert settings.network.gas_price_gwei == 40
        assert settings.network.local is False
        assert settings.contract.symbol == 'CERTX'
        assert settings.deployments_dir == 'deployments'
        assert settings.strict_verification is False
        assert settings.confirmation_policy().required_confirmations(137) == 5

    def test_local_network_detected_from_chain_id(self, tmp_path):
        settings = build_settings('localhost', write_config(tmp_path))

        assert settings.network.local is True

    def test_unknown_network(self, tmp_path):
        with pytest.raises(UnknownNetworkError) as exc_info:
            build_settings('solana', write_config(tmp_path))

        assert 'solana' in str(exc_info.value)

    def test_missing_contract_setting(self, tmp_path):
        path = write_config(tmp_path, contract={'name': 'CertiProof X'})

        with pytest.raises(ConfigError):
            build_settings('localhost', path)

    def test_missing_config_file(self, tmp_path):
        with pytest.raises(ConfigError):
            load_config(str(tmp_path / 'missing.json'))

    def test_invalid_json(self, tmp_path):
        path = tmp_path / 'broken.json'
        path.write_text('{')

        with pytest.raises(ConfigError):
            load_config(str(path))

    def test_network_settings_defaults(self):
        network = build_network_settings('dev', {'networks': {'dev': {'rpc_url': 'http://localhost:8545'}}})

        assert network.chain_id is None
        assert network.timeout == 300
        assert network.local is False

    def test_shipped_config_is_valid(self, monkeypatch):
        """config/deploy_config.json loads for the local network"""
        monkeypatch.delenv('LOCALHOST_RPC_URL', raising=False)

        settings = build_settings('localhost', 'config/deploy_config.json')

        assert settings.network.rpc_url == 'http://127.0.0.1:8545'
        assert settings.confirmation_policy().required_confirmations(1) == 5
