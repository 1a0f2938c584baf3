"""
Test configuration and fixtures
"""
import copy

import pytest

from level_rewards.config import Settings
from level_rewards.models.level import Level


LEVEL_DOCUMENT = {
    'level': 1,
    'name': 'Test Level',
    'nodes': [
        {
            'id': 'center',
            'type': 'accountNode',
            'data': {'label': 'Account'},
            'position': {'x': 0, 'y': 0}
        },
        {
            'id': 'btc-fp1',
            'type': 'fingerprintNode',
            'data': {
                'label': 'FP1',
                'transaction': {'id': 'tx_001', 'currency': 'BTC', 'amount': 0.025, 'status': 'Success'}
            }
        },
        {
            'id': 'btc-fp2',
            'type': 'fingerprintNode',
            'data': {
                'label': 'FP2',
                'transaction': {'id': 'tx_002', 'currency': 'BTC', 'amount': 0.030, 'status': 'Fail'}
            }
        },
        {
            'id': 'eth-fp1',
            'type': 'fingerprintNode',
            'data': {
                'label': 'FP3',
                'transaction': {'id': 'tx_003', 'currency': 'ETH', 'amount': 1.0, 'status': 'Success'}
            }
        },
        {
            'id': 'eth-fp2',
            'type': 'fingerprintNode',
            'data': {
                'label': 'FP4',
                'transaction': {'id': 'tx_004', 'currency': 'ETH', 'amount': 1.5, 'status': 'Pending'}
            }
        }
    ],
    'edges': [
        {'id': 'e1', 'source': 'center', 'target': 'btc-fp1', 'animated': True},
        {'id': 'e2', 'source': 'center', 'target': 'btc-fp2'},
        {'id': 'e3', 'source': 'center', 'target': 'eth-fp1'},
        {'id': 'e4', 'source': 'center', 'target': 'eth-fp2'}
    ]
}


@pytest.fixture
def config():
    return Settings(_env_file=None)


@pytest.fixture
def level_document():
    return copy.deepcopy(LEVEL_DOCUMENT)


@pytest.fixture
def level(level_document):
    return Level.from_document(level_document)


def amounts_for(level, currency):
    """Transaction amounts of the fingerprint nodes of one currency, in level order"""
    return [
        node.data.transaction.amount
        for node in level.fingerprint_nodes()
        if node.data.transaction.currency == currency
    ]
