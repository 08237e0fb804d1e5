import jax.numpy as jnp
import pytest

from orbitpass.config import set_dtype


@pytest.fixture(autouse=True)
def _ensure_float64():
    """Run every test at float64 precision and restore it afterwards.

    Tests that switch to float32 would otherwise leak the setting into later
    tests and module-scoped fixtures run by the same worker.
    """
    set_dtype(jnp.float64)
    yield
    set_dtype(jnp.float64)
