import unittest

from nanotensor.domain._errors import ShapeError, GraphError


class TestShapeError(unittest.TestCase):
    def test_is_value_error(self):
        self.assertTrue(issubclass(ShapeError, ValueError))

    def test_carries_expected_and_actual(self):
        err = ShapeError("bad", expected=(2, 3), actual=(3, 2))
        self.assertEqual(str(err), "bad")
        self.assertEqual(err.expected, (2, 3))
        self.assertEqual(err.actual, (3, 2))

    def test_expected_and_actual_default_none(self):
        err = ShapeError("bad")
        self.assertIsNone(err.expected)
        self.assertIsNone(err.actual)


class TestGraphError(unittest.TestCase):
    def test_is_runtime_error(self):
        self.assertTrue(issubclass(GraphError, RuntimeError))

    def test_carries_node(self):
        err = GraphError("cycle", node="Tensor(shape=(2,))")
        self.assertEqual(str(err), "cycle")
        self.assertEqual(err.node, "Tensor(shape=(2,))")


if __name__ == "__main__":
    unittest.main()
