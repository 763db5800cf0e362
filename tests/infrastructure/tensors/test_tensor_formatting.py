from unittest import TestCase
import unittest

from nanotensor.infrastructure.tensor._tensor import Tensor
from nanotensor.infrastructure.tensor._formatting import format_number


class TestTensorToString(TestCase):
    def test_2d(self):
        t = Tensor.from_nested([[1, 2, 3], [4, 5, 6]])
        self.assertEqual(
            t.to_string(),
            "tensor([\n  [1, 2, 3],\n  [4, 5, 6]\n], dtype=float32)",
        )

    def test_1d(self):
        t = Tensor.from_nested([1, 2.5, -3])
        self.assertEqual(t.to_string(), "tensor([1, 2.5, -3], dtype=float32)")

    def test_3d_indents_two_spaces_per_level(self):
        t = Tensor.from_nested([[[1, 2], [3, 4]], [[5, 6], [7, 8]]])
        expected = (
            "tensor([\n"
            "  [\n"
            "    [1, 2],\n"
            "    [3, 4]\n"
            "  ],\n"
            "  [\n"
            "    [5, 6],\n"
            "    [7, 8]\n"
            "  ]\n"
            "], dtype=float32)"
        )
        self.assertEqual(t.to_string(), expected)

    def test_str_and_repr_match(self):
        t = Tensor.arange(3)
        self.assertEqual(str(t), t.to_string())
        self.assertEqual(repr(t), t.to_string())

    def test_scalar_shape(self):
        self.assertEqual(Tensor.full((), 4).to_string(), "tensor(4, dtype=float32)")

    def test_empty(self):
        self.assertEqual(Tensor.zeros((0,)).to_string(), "tensor([], dtype=float32)")
        self.assertEqual(
            Tensor.zeros((2, 0)).to_string(),
            "tensor([\n  [],\n  []\n], dtype=float32)",
        )

    def test_formatting_does_not_mutate(self):
        t = Tensor.from_nested([[1, 2], [3, 4]])
        before = t.data.copy()
        t.to_string()
        self.assertEqual(t.data.tolist(), before.tolist())
        self.assertEqual(t.shape, (2, 2))


class TestFormatNumber(TestCase):
    def test_integral_values_drop_fraction(self):
        self.assertEqual(format_number(1.0), "1")
        self.assertEqual(format_number(-7.0), "-7")

    def test_shortest_float32_digits(self):
        self.assertEqual(format_number(0.1), "0.1")
        self.assertEqual(format_number(0.5), "0.5")

    def test_non_finite(self):
        self.assertEqual(format_number(float("nan")), "nan")
        self.assertEqual(format_number(float("inf")), "inf")


if __name__ == "__main__":
    unittest.main()
