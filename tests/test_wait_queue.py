import unittest

from firstfit_memory import QueueFull
from firstfit_memory.wait_queue import WaitQueue


class WaitQueueTests(unittest.TestCase):
    def test_fifo_order(self) -> None:
        queue = WaitQueue(max_length=3)
        queue.push(1, 10)
        queue.push(2, 5)
        self.assertEqual(queue.peek().process_id, 1)
        self.assertEqual(queue.pop().process_id, 1)
        self.assertEqual(queue.pop().process_id, 2)
        self.assertIsNone(queue.peek())

    def test_bound_is_enforced(self) -> None:
        queue = WaitQueue(max_length=1)
        queue.push(1, 10)
        with self.assertRaises(QueueFull) as ctx:
            queue.push(2, 5)
        self.assertEqual(ctx.exception.process_id, 2)
        self.assertEqual(len(queue), 1)
        self.assertIn(1, queue)
        self.assertNotIn(2, queue)


if __name__ == "__main__":
    unittest.main()
