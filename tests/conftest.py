# tests/conftest.py
import json
import time

import jwt
import pytest
from cryptography.hazmat.primitives.asymmetric import ec, ed25519, rsa
from jwt.algorithms import ECAlgorithm, RSAAlgorithm


@pytest.fixture(scope="session")
def rsa_key_1():
    return rsa.generate_private_key(public_exponent=65537, key_size=2048)


@pytest.fixture(scope="session")
def rsa_key_2():
    return rsa.generate_private_key(public_exponent=65537, key_size=2048)


@pytest.fixture(scope="session")
def ec_key():
    return ec.generate_private_key(ec.SECP256R1())


@pytest.fixture(scope="session")
def ec_key_p384():
    return ec.generate_private_key(ec.SECP384R1())


@pytest.fixture(scope="session")
def ed_key():
    return ed25519.Ed25519PrivateKey.generate()


@pytest.fixture
def future_exp():
    return int(time.time()) + 3600


@pytest.fixture
def mint():
    """Sign `claims` into a compact JWS."""
    def _mint(private_key, claims, algorithm="RS256", headers=None):
        return jwt.encode(claims, private_key, algorithm=algorithm, headers=headers)
    return _mint


@pytest.fixture
def rsa_jwk():
    """Public JWK dict for an RSA private key."""
    def _rsa_jwk(private_key, kid=None, **extra):
        data = json.loads(RSAAlgorithm.to_jwk(private_key.public_key()))
        if kid is not None:
            data["kid"] = kid
        data.update(extra)
        return data
    return _rsa_jwk


@pytest.fixture
def ec_jwk():
    def _ec_jwk(private_key, kid=None, **extra):
        data = json.loads(ECAlgorithm.to_jwk(private_key.public_key()))
        if kid is not None:
            data["kid"] = kid
        data.update(extra)
        return data
    return _ec_jwk
