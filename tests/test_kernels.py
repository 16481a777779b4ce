"""
Test backend selection and the parallel matrix kernels.

Kernels are checked against NumPy references:
- transpose: parallel result must equal the serial reference exactly
- multiply: parallel result within eps * inner_dim of the serial reference
- PyTorch backend: tested if torch is installed
"""

import pytest
import numpy as np

from pypolyfit._backends import (
    get_backend,
    list_available_backends,
    print_backend_info,
    partition,
    TORCH_AVAILABLE,
)
from pypolyfit._core.matrix import Matrix
from pypolyfit.exceptions import ShapeError, ErrorKind


PARALLEL_BACKENDS = ['threads'] + (['torch'] if TORCH_AVAILABLE else [])


def random_matrix(rows, cols, seed):
    rng = np.random.default_rng(seed)
    return Matrix.from_array(rng.standard_normal((rows, cols)))


class TestBackendSelection:
    """Test backend availability and construction."""

    def test_list_backends(self):
        backends = list_available_backends()
        assert isinstance(backends, list)
        assert 'threads' in backends
        assert 'serial' in backends
        assert ('torch' in backends) == TORCH_AVAILABLE

    def test_print_backend_info(self, capsys):
        print_backend_info()
        captured = capsys.readouterr()
        assert 'Backend Status' in captured.out
        assert 'threads' in captured.out

    def test_auto_is_threads(self):
        backend = get_backend('auto', workers=3)
        assert backend.name == 'threads'
        assert backend.workers == 3

    def test_default_workers_is_hardware_concurrency(self):
        backend = get_backend('threads')
        assert backend.workers >= 1

    def test_serial_has_one_worker(self):
        backend = get_backend('serial', workers=8)
        assert backend.name == 'serial'
        assert backend.workers == 1

    def test_device_info(self):
        info = get_backend('threads', workers=2).get_device_info()
        assert info['backend'] == 'cpu'
        assert info['scheduling'] == 'threads'
        assert info['workers'] == 2

    def test_invalid_backend_name(self):
        with pytest.raises(ValueError, match="Unknown backend"):
            get_backend('gpu')

    def test_invalid_worker_count(self):
        with pytest.raises(ValueError):
            get_backend('threads', workers=0)

    @pytest.mark.skipif(TORCH_AVAILABLE, reason="Test requires torch to be absent")
    def test_torch_without_torch(self):
        with pytest.raises(RuntimeError, match="PyTorch"):
            get_backend('torch')


class TestPartition:
    """Test row partitioning across workers."""

    def test_remainder_goes_to_lowest_workers(self):
        assert partition(10, 4) == [(0, 3), (3, 6), (6, 8), (8, 10)]

    def test_even_split(self):
        assert partition(8, 4) == [(0, 2), (2, 4), (4, 6), (6, 8)]

    def test_more_workers_than_rows(self):
        assert partition(3, 8) == [(0, 1), (1, 2), (2, 3)]

    def test_empty(self):
        assert partition(0, 4) == []

    @pytest.mark.parametrize("n,w", [(1, 1), (7, 3), (100, 7), (256, 16), (5, 5)])
    def test_covers_range_with_imbalance_at_most_one(self, n, w):
        ranges = partition(n, w)
        covered = [i for start, stop in ranges for i in range(start, stop)]
        assert covered == list(range(n))
        sizes = [stop - start for start, stop in ranges]
        assert max(sizes) - min(sizes) <= 1
        assert sizes == sorted(sizes, reverse=True)

    def test_rejects_zero_workers(self):
        with pytest.raises(ValueError):
            partition(4, 0)


class TestTranspose:
    """Test the blocked transpose kernel."""

    @pytest.mark.parametrize("backend_name", PARALLEL_BACKENDS)
    @pytest.mark.parametrize("shape", [(1, 1), (1, 7), (7, 1), (33, 65), (256, 256), (100, 3)])
    @pytest.mark.parametrize("workers", [1, 3, 8])
    def test_matches_serial_exactly(self, backend_name, shape, workers):
        m = random_matrix(*shape, seed=42)
        reference = get_backend('serial').transpose(m)
        result = get_backend(backend_name, workers=workers).transpose(m)

        assert result.shape == (shape[1], shape[0])
        np.testing.assert_array_equal(result.data, reference.data)
        np.testing.assert_array_equal(result.data, m.data.T)

    @pytest.mark.parametrize("block", [1, 5, 32, 1000])
    def test_block_sizes(self, block):
        m = random_matrix(70, 45, seed=1)
        result = get_backend('threads', workers=4).transpose(m, block=block)
        np.testing.assert_array_equal(result.data, m.data.T)

    def test_rejects_bad_block(self):
        m = random_matrix(4, 4, seed=0)
        with pytest.raises(ValueError, match="block"):
            get_backend('threads').transpose(m, block=0)

    def test_result_is_fresh(self):
        m = random_matrix(4, 6, seed=0)
        result = get_backend('threads', workers=2).transpose(m)
        result[0, 0] = 123.0
        assert m[0, 0] != 123.0

    def test_source_unchanged(self):
        m = random_matrix(40, 40, seed=3)
        before = m.to_numpy()
        get_backend('threads', workers=4).transpose(m, block=8)
        np.testing.assert_array_equal(m.data, before)


class TestMultiply:
    """Test the row-partitioned multiply kernel."""

    @pytest.mark.parametrize("backend_name", PARALLEL_BACKENDS)
    @pytest.mark.parametrize("p,q,s", [(1, 1, 1), (3, 5, 2), (17, 31, 9), (256, 256, 256), (4, 1000, 4)])
    @pytest.mark.parametrize("workers", [1, 4, 7])
    def test_matches_serial_reference(self, backend_name, p, q, s, workers):
        left = random_matrix(p, q, seed=10)
        right = random_matrix(q, s, seed=11)
        reference = get_backend('serial').multiply(left, right)
        result = get_backend(backend_name, workers=workers).multiply(left, right)

        assert result.shape == (p, s)
        np.testing.assert_allclose(result.data, reference.data, rtol=0, atol=1e-12 * q)

    def test_matches_numpy_within_envelope(self):
        left = random_matrix(50, 80, seed=5)
        right = random_matrix(80, 20, seed=6)
        result = get_backend('threads', workers=4).multiply(left, right)
        np.testing.assert_allclose(
            result.data, left.data @ right.data, rtol=0, atol=1e-9 * 50 * 80
        )

    def test_shape_mismatch(self):
        left = random_matrix(3, 4, seed=0)
        right = random_matrix(5, 2, seed=0)
        with pytest.raises(ShapeError) as excinfo:
            get_backend('threads').multiply(left, right)
        assert excinfo.value.kind is ErrorKind.SHAPE
        assert excinfo.value.left_shape == (3, 4)
        assert excinfo.value.right_shape == (5, 2)

    def test_deterministic_for_fixed_workers(self):
        left = random_matrix(64, 500, seed=7)
        right = random_matrix(500, 64, seed=8)
        backend = get_backend('threads', workers=4)
        first = backend.multiply(left, right)
        second = backend.multiply(left, right)
        np.testing.assert_array_equal(first.data, second.data)

    def test_released_operand_raises(self):
        backend = get_backend('threads', workers=4)
        left = random_matrix(8, 3, seed=0)
        right = random_matrix(3, 2, seed=0)
        right.release()
        with pytest.raises(RuntimeError, match="released"):
            backend.multiply(left, right)


class TestVandermonde:
    """Test the design matrix fill."""

    @pytest.mark.parametrize("backend_name", ['serial'] + PARALLEL_BACKENDS)
    @pytest.mark.parametrize("strategy", ['library-pow', 'iterative'])
    def test_matches_numpy_vander(self, backend_name, strategy):
        x = np.linspace(-2.0, 3.0, 57)
        a = get_backend(backend_name, workers=4).vandermonde(x, 5, strategy)
        assert a.shape == (57, 5)
        np.testing.assert_allclose(a.data, np.vander(x, 5), rtol=1e-14, atol=0)

    def test_library_pow_matches_pow_exactly(self):
        x = np.array([0.5, -1.5, 2.0, 0.0, 3.25])
        a = get_backend('threads', workers=2).vandermonde(x, 4, 'library-pow')
        expected = np.power(x[:, np.newaxis], np.array([3.0, 2.0, 1.0, 0.0]))
        np.testing.assert_array_equal(a.data, expected)

    def test_constant_column_is_one(self):
        x = np.array([0.0, -0.0, 5.0])
        a = get_backend('serial').vandermonde(x, 3, 'iterative')
        np.testing.assert_array_equal(a.data[:, 2], 1.0)

    def test_single_coefficient(self):
        x = np.array([1.0, 2.0, 3.0])
        a = get_backend('threads', workers=2).vandermonde(x, 1)
        np.testing.assert_array_equal(a.data, np.ones((3, 1)))

    def test_unknown_strategy(self):
        with pytest.raises(ValueError, match="pow_strategy"):
            get_backend('serial').vandermonde(np.ones(3), 2, 'fast')


@pytest.mark.skipif(not TORCH_AVAILABLE, reason="PyTorch not available")
class TestTorchBackend:
    """Test PyTorch CPU backend."""

    def test_torch_backend_creation(self):
        backend = get_backend('torch', workers=2)
        assert backend.name == 'torch'
        assert backend.workers == 2

    def test_torch_device_info(self):
        info = get_backend('torch', workers=2).get_device_info()
        assert info['backend'] == 'cpu'
        assert 'PyTorch' in info['library']

    def test_torch_shape_mismatch(self):
        with pytest.raises(ShapeError):
            get_backend('torch').multiply(random_matrix(2, 3, 0), random_matrix(2, 3, 0))


class TestKernelFailure:
    """Test that a kernel releases its result when a worker fails."""

    @pytest.fixture
    def created(self, monkeypatch):
        matrices = []
        original_create = Matrix.create.__func__

        def tracking_create(cls, rows, cols):
            m = original_create(cls, rows, cols)
            matrices.append(m)
            return m

        monkeypatch.setattr(Matrix, 'create', classmethod(tracking_create))
        return matrices

    @pytest.mark.parametrize("kernel", ['vandermonde', 'transpose', 'multiply'])
    def test_result_released_on_worker_error(self, kernel, created, monkeypatch):
        backend = get_backend('threads', workers=4)
        operand = Matrix.from_array(np.ones((40, 3)))
        other = Matrix.from_array(np.ones((3, 2)))
        created.clear()

        def failing_run(task, ranges):
            raise RuntimeError("worker failed")

        monkeypatch.setattr(backend, '_run_ranges', failing_run)
        with pytest.raises(RuntimeError, match="worker failed"):
            if kernel == 'vandermonde':
                backend.vandermonde(np.arange(40.0), 3)
            elif kernel == 'transpose':
                backend.transpose(operand)
            else:
                backend.multiply(operand, other)

        assert len(created) == 1
        assert created[0].released
        assert not operand.released


class TestTransposeScheduling:
    """Test how transpose work is split across workers."""

    def test_one_strip_per_worker(self, monkeypatch):
        backend = get_backend('threads', workers=4)
        recorded = []
        original_run = backend._run_ranges

        def recording_run(task, ranges):
            recorded.extend(ranges)
            original_run(task, ranges)

        monkeypatch.setattr(backend, '_run_ranges', recording_run)
        m = random_matrix(1000, 4, seed=2)
        result = backend.transpose(m, block=32)

        # 1000 rows make 32 tile rows, split into 4 strips of 8
        assert recorded == [(0, 8), (8, 16), (16, 24), (24, 32)]
        np.testing.assert_array_equal(result.data, m.data.T)
