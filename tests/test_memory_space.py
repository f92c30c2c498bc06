import unittest

from firstfit_memory import Block, BlockTable, CapacityExceeded, InvalidArgument


def assert_partition(test: unittest.TestCase, table: BlockTable, capacity: int) -> None:
    blocks = table.blocks()
    test.assertEqual(blocks[0].start, 0)
    for left, right in zip(blocks, blocks[1:]):
        test.assertEqual(left.end, right.start)
    test.assertEqual(blocks[-1].end, capacity)


class BlockTableTests(unittest.TestCase):
    def test_initialize_lays_blocks_back_to_back(self) -> None:
        table = BlockTable([100, 50, 30])
        self.assertEqual(
            table.blocks(),
            [Block(0, 100), Block(100, 50), Block(150, 30)],
        )
        self.assertEqual(table.capacity, 180)
        self.assertEqual(table.total_free(), 180)

    def test_initialize_rejects_too_many_blocks(self) -> None:
        with self.assertRaises(CapacityExceeded):
            BlockTable([1, 2, 3], max_blocks=2)

    def test_initialize_rejects_bad_sizes(self) -> None:
        with self.assertRaises(InvalidArgument):
            BlockTable([])
        with self.assertRaises(InvalidArgument):
            BlockTable([10, 0])
        with self.assertRaises(InvalidArgument):
            BlockTable([10, -5])

    def test_first_fit_takes_lowest_address(self) -> None:
        table = BlockTable([10, 50, 30, 50])
        self.assertEqual(table.find_first_fit(40), 1)
        self.assertEqual(table.find_first_fit(50), 1)
        self.assertEqual(table.find_first_fit(5), 0)
        self.assertIsNone(table.find_first_fit(51))

    def test_first_fit_skips_allocated_blocks(self) -> None:
        table = BlockTable([30, 30])
        table.split(0, 30)
        self.assertEqual(table.find_first_fit(30), 1)

    def test_split_inserts_free_remainder(self) -> None:
        table = BlockTable([100, 50])
        allocated = table.split(0, 20)
        self.assertEqual(allocated, Block(0, 20, free=False))
        self.assertEqual(
            table.blocks(),
            [Block(0, 20, free=False), Block(20, 80), Block(100, 50)],
        )
        assert_partition(self, table, 150)

    def test_exact_split_marks_in_place(self) -> None:
        table = BlockTable([100, 50])
        table.split(1, 50)
        self.assertEqual(len(table), 2)
        self.assertFalse(table.blocks()[1].free)

    def test_split_at_block_limit_is_rejected_without_change(self) -> None:
        table = BlockTable([100, 50], max_blocks=2)
        before = table.blocks()
        with self.assertRaises(CapacityExceeded):
            table.split(0, 10)
        self.assertEqual(table.blocks(), before)
        # An exact fit needs no new block.
        table.split(1, 50)
        self.assertEqual(len(table), 2)

    def test_split_requires_free_block_large_enough(self) -> None:
        table = BlockTable([10])
        with self.assertRaises(InvalidArgument):
            table.split(0, 11)
        table.split(0, 10)
        with self.assertRaises(InvalidArgument):
            table.split(0, 10)

    def test_free_does_not_coalesce(self) -> None:
        table = BlockTable([60])
        table.split(0, 20)
        table.split(1, 20)
        table.free_block_containing(0)
        table.free_block_containing(20)
        self.assertEqual(
            table.blocks(),
            [Block(0, 20), Block(20, 20), Block(40, 20)],
        )
        self.assertEqual(table.total_free(), 60)
        self.assertIsNone(table.find_first_fit(21))

    def test_free_unknown_address(self) -> None:
        table = BlockTable([60])
        with self.assertRaises(InvalidArgument):
            table.free_block_containing(7)

    def test_fragmentation(self) -> None:
        table = BlockTable([10, 30])
        self.assertAlmostEqual(table.fragmentation(), 0.25)
        table.split(0, 10)
        table.split(1, 30)
        self.assertEqual(table.fragmentation(), 0.0)
        self.assertEqual(table.allocated(), 40)


if __name__ == "__main__":
    unittest.main()
