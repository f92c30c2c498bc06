import unittest

import firstfit_memory as ffm
from firstfit_memory import CapacityExceeded, InvalidArgument, ProcessNotFound, SystemLimits


class SystemFacadeTests(unittest.TestCase):
    def test_create_allocate_free_snapshot(self) -> None:
        system = ffm.create_system([100, 50, 30])
        self.assertEqual(ffm.allocate(system, 1, 20).address, 0)
        self.assertEqual(ffm.allocate(system, 2, 80).address, 20)
        self.assertTrue(ffm.allocate(system, 3, 60).queued)

        freed = ffm.free(system, 1)
        self.assertEqual((freed.address, freed.size), (0, 20))

        view = ffm.snapshot(system)
        self.assertEqual(
            view["blocks"],
            [
                {"start": 0, "size": 20, "free": True},
                {"start": 20, "size": 80, "free": False},
                {"start": 100, "size": 50, "free": True},
                {"start": 150, "size": 30, "free": True},
            ],
        )
        self.assertEqual(view["active_processes"], [{"id": 2, "address": 20, "size": 80}])
        self.assertEqual(view["waiting"], [{"process_id": 3, "size": 60}])

    def test_independent_systems(self) -> None:
        first = ffm.create_system([10])
        second = ffm.create_system([10])
        ffm.allocate(first, 1, 10)
        self.assertEqual(ffm.allocate(second, 1, 10).address, 0)
        ffm.free(first, 1)
        with self.assertRaises(ProcessNotFound):
            ffm.free(first, 1)
        self.assertEqual(second.state_of(1), "active")

    def test_create_system_respects_block_limit(self) -> None:
        with self.assertRaises(CapacityExceeded):
            ffm.create_system([1] * 4, limits=SystemLimits(max_blocks=3))


class SystemLimitsTests(unittest.TestCase):
    def test_defaults(self) -> None:
        limits = SystemLimits()
        self.assertEqual((limits.max_blocks, limits.max_processes, limits.max_wait_queue), (50, 50, 50))

    def test_rejects_non_positive_bounds(self) -> None:
        with self.assertRaises(InvalidArgument):
            SystemLimits(max_blocks=0)
        with self.assertRaises(InvalidArgument):
            SystemLimits(max_wait_queue=-1)
        with self.assertRaises(ValueError):
            SystemLimits(max_processes=0)


if __name__ == "__main__":
    unittest.main()
