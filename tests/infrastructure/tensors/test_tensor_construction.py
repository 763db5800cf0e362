from unittest import TestCase
import array
import unittest

import numpy as np

from nanotensor.domain._errors import ShapeError
from nanotensor.infrastructure.tensor._tensor import Tensor


class TestTensorFromNested(TestCase):
    def test_2d_shape_and_row_major_data(self):
        t = Tensor.from_nested([[1, 2, 3], [4, 5, 6]])
        self.assertEqual(t.shape, (2, 3))
        self.assertEqual(t.data.dtype, np.float32)
        self.assertEqual(t.data.ndim, 1)
        np.testing.assert_array_equal(t.data, np.arange(1, 7, dtype=np.float32))

    def test_3d_shape_and_layout(self):
        nested = [[[1, 2], [3, 4], [5, 6]], [[7, 8], [9, 10], [11, 12]]]
        t = Tensor.from_nested(nested)
        self.assertEqual(t.shape, (2, 3, 2))
        np.testing.assert_array_equal(t.data, np.arange(1, 13, dtype=np.float32))

    def test_element_lands_at_strided_offset(self):
        nested = [[[i * 100 + j * 10 + k for k in range(4)] for j in range(3)] for i in range(2)]
        t = Tensor.from_nested(nested)
        strides = t.stride()
        self.assertEqual(strides, (12, 4, 1))
        for i in range(2):
            for j in range(3):
                for k in range(4):
                    offset = i * strides[0] + j * strides[1] + k * strides[2]
                    self.assertEqual(t.data[offset], nested[i][j][k])

    def test_round_trip_tolist(self):
        for nested in (
            [1.5, -2.0, 3.25],
            [[1, 2], [3, 4], [5, 6]],
            [[[0.5]], [[1.5]]],
        ):
            t = Tensor.from_nested(nested)
            self.assertEqual(t.tolist(), nested)

    def test_tuples_are_accepted(self):
        t = Tensor.from_nested(((1, 2), (3, 4)))
        self.assertEqual(t.shape, (2, 2))

    def test_numpy_scalars_are_accepted(self):
        t = Tensor.from_nested([np.float64(1.5), np.int32(2)])
        np.testing.assert_array_equal(t.data, np.array([1.5, 2.0], dtype=np.float32))

    def test_empty_list(self):
        t = Tensor.from_nested([])
        self.assertEqual(t.shape, (0,))
        self.assertEqual(t.data.size, 0)

    def test_zero_sized_inner_dimension(self):
        t = Tensor.from_nested([[], []])
        self.assertEqual(t.shape, (2, 0))
        self.assertEqual(t.data.size, 0)

    def test_ragged_rows_raise_shape_error(self):
        with self.assertRaises(ShapeError):
            Tensor.from_nested([[1, 2], [3]])

    def test_ragged_deep_raise_shape_error(self):
        with self.assertRaises(ShapeError):
            Tensor.from_nested([[[1, 2], [3, 4]], [[5, 6], [7]]])

    def test_number_beside_list_raises_shape_error(self):
        with self.assertRaises(ShapeError):
            Tensor.from_nested([1, [2, 3]])
        with self.assertRaises(ShapeError):
            Tensor.from_nested([[1, 2], 3])
        with self.assertRaises(ShapeError):
            Tensor.from_nested([[], 1])

    def test_non_numeric_leaf_raises_type_error(self):
        with self.assertRaises(TypeError):
            Tensor.from_nested([1, "2", 3])
        with self.assertRaises(TypeError):
            Tensor.from_nested([[1, None]])
        with self.assertRaises(TypeError):
            Tensor.from_nested([True, False])

    def test_non_sequence_input_raises_type_error(self):
        with self.assertRaises(TypeError):
            Tensor.from_nested(3.0)
        with self.assertRaises(TypeError):
            Tensor.from_nested("123")
        with self.assertRaises(TypeError):
            Tensor.from_nested({"a": 1})

    def test_requires_grad_flag(self):
        self.assertFalse(Tensor.from_nested([1.0]).requires_grad)
        self.assertTrue(Tensor.from_nested([1.0], requires_grad=True).requires_grad)


class TestTensorFromScalar(TestCase):
    def test_scalar_has_shape_one(self):
        t = Tensor.from_scalar(3.5)
        self.assertEqual(t.shape, (1,))
        self.assertEqual(t.item(), 3.5)

    def test_int_scalar(self):
        self.assertEqual(Tensor.from_scalar(7).tolist(), [7.0])

    def test_non_number_raises_type_error(self):
        with self.assertRaises(TypeError):
            Tensor.from_scalar("3")
        with self.assertRaises(TypeError):
            Tensor.from_scalar([3])


class TestTensorFromBuffer(TestCase):
    def test_float32_buffer_is_shared(self):
        buf = np.array([1, 2, 3, 4], dtype=np.float32)
        t = Tensor.from_buffer(buf)
        self.assertEqual(t.shape, (4,))
        buf[0] = 42.0
        self.assertEqual(t.data[0], 42.0)

    def test_buffer_with_explicit_shape(self):
        t = Tensor.from_buffer(np.arange(6, dtype=np.float32), (2, 3))
        self.assertEqual(t.shape, (2, 3))
        self.assertEqual(t.tolist(), [[0, 1, 2], [3, 4, 5]])

    def test_other_dtypes_are_converted(self):
        t = Tensor.from_buffer(np.arange(3, dtype=np.float64))
        self.assertEqual(t.data.dtype, np.float32)
        np.testing.assert_array_equal(t.data, [0, 1, 2])

    def test_array_module_buffer(self):
        t = Tensor.from_buffer(array.array("f", [1.0, 2.0]))
        self.assertEqual(t.tolist(), [1.0, 2.0])

    def test_shape_mismatch_raises_shape_error(self):
        with self.assertRaises(ShapeError):
            Tensor.from_buffer(np.zeros(5, dtype=np.float32), (2, 3))

    def test_multidimensional_buffer_raises_shape_error(self):
        with self.assertRaises(ShapeError):
            Tensor.from_buffer(np.zeros((2, 2), dtype=np.float32))

    def test_unsupported_input_raises_type_error(self):
        with self.assertRaises(TypeError):
            Tensor.from_buffer([1.0, 2.0])
        with self.assertRaises(TypeError):
            Tensor.from_buffer(np.array(["a", "b"]))


class TestTensorFromNumpy(TestCase):
    def test_copies_and_keeps_shape(self):
        arr = np.arange(6, dtype=np.float64).reshape(2, 3)
        t = Tensor.from_numpy(arr)
        self.assertEqual(t.shape, (2, 3))
        arr[0, 0] = 99
        self.assertEqual(t.data[0], 0.0)

    def test_non_array_raises_type_error(self):
        with self.assertRaises(TypeError):
            Tensor.from_numpy([1, 2])


class TestTensorShapeAllocation(TestCase):
    def test_constructor_allocates_zeros(self):
        t = Tensor((2, 3))
        self.assertEqual(t.shape, (2, 3))
        self.assertEqual(t.data.size, 6)
        self.assertTrue(np.all(t.data == 0.0))

    def test_single_int_shape(self):
        t = Tensor.with_shape(4)
        self.assertEqual(t.shape, (4,))

    def test_zeros_ones_full(self):
        for shape in ((3,), (2, 3), (2, 1, 4), ()):
            n = int(np.prod(shape))
            z = Tensor.zeros(shape)
            o = Tensor.ones(shape)
            f = Tensor.full(shape, 2.5)
            for t in (z, o, f):
                self.assertEqual(t.shape, shape)
                self.assertEqual(t.data.size, n)
            self.assertTrue(np.all(z.data == 0.0))
            self.assertTrue(np.all(o.data == 1.0))
            self.assertTrue(np.all(f.data == 2.5))

    def test_zero_sized_dimension_collapses_buffer(self):
        t = Tensor.zeros((3, 0, 2))
        self.assertEqual(t.shape, (3, 0, 2))
        self.assertEqual(t.data.size, 0)

    def test_like_factories(self):
        ref = Tensor.from_nested([[1, 2], [3, 4]])
        self.assertEqual(Tensor.zeros_like(ref).shape, (2, 2))
        self.assertTrue(np.all(Tensor.ones_like(ref).data == 1.0))

    def test_negative_dimension_raises_shape_error(self):
        with self.assertRaises(ShapeError):
            Tensor.zeros((2, -1))

    def test_non_integer_dimension_raises_type_error(self):
        with self.assertRaises(TypeError):
            Tensor.zeros((2, 3.5))
        with self.assertRaises(TypeError):
            Tensor.zeros("23")

    def test_full_non_number_raises_type_error(self):
        with self.assertRaises(TypeError):
            Tensor.full((2,), "1")


class TestTensorArange(TestCase):
    def test_start_stop_step(self):
        self.assertEqual(Tensor.arange(0, 10, 2).tolist(), [0, 2, 4, 6, 8])

    def test_single_argument(self):
        self.assertEqual(Tensor.arange(5).tolist(), [0, 1, 2, 3, 4])

    def test_negative_step(self):
        self.assertEqual(Tensor.arange(3, 0, -1).tolist(), [3, 2, 1])

    def test_fractional_step(self):
        np.testing.assert_allclose(Tensor.arange(0, 1, 0.25).data, [0, 0.25, 0.5, 0.75])

    def test_empty_range(self):
        t = Tensor.arange(5, 0)
        self.assertEqual(t.shape, (0,))

    def test_zero_step_raises_value_error(self):
        with self.assertRaises(ValueError):
            Tensor.arange(0, 5, 0)

    def test_non_number_raises_type_error(self):
        with self.assertRaises(TypeError):
            Tensor.arange("5")


class TestTensorIntrospection(TestCase):
    def test_size_and_numel(self):
        t = Tensor.zeros((2, 3, 4))
        self.assertEqual(t.size(), (2, 3, 4))
        self.assertEqual(t.size(0), 2)
        self.assertEqual(t.size(-1), 4)
        self.assertEqual(t.numel(), 24)
        self.assertEqual(t.ndim, 3)
        self.assertEqual(t.dtype, np.float32)

    def test_size_out_of_range_raises_index_error(self):
        t = Tensor.zeros((2, 3))
        with self.assertRaises(IndexError):
            t.size(2)
        with self.assertRaises(IndexError):
            t.size(-3)

    def test_item_requires_single_element(self):
        with self.assertRaises(ValueError):
            Tensor.zeros((2,)).item()

    def test_to_numpy_is_shaped_view(self):
        t = Tensor.from_nested([[1, 2], [3, 4]])
        arr = t.to_numpy()
        self.assertEqual(arr.shape, (2, 2))
        arr[1, 1] = 10.0
        self.assertEqual(t.data[3], 10.0)


if __name__ == "__main__":
    unittest.main()
