import numpy as np

from synblocks import RESOURCES, jit


class TestResources:
    def test_package_name(self):
        assert RESOURCES.package == 'synblocks'

    def test_has_module(self):
        assert RESOURCES.has_module('numpy')
        assert not RESOURCES.has_module('definitely_not_a_module_xyz')

    def test_rng_is_shared(self):
        assert isinstance(RESOURCES.rng, np.random.Generator)
        assert RESOURCES.rng is RESOURCES.rng


class TestJit:
    def test_bare_and_configured_usage(self):
        @jit
        def add(a, b): return a + b

        @jit(nopython=True, cache=False)
        def total(arr):
            s = 0
            for x in arr: s += x
            return s

        assert add(2, 3) == 5
        assert total(np.arange(5)) == 10
