import tempfile
import unittest
from pathlib import Path

from experiments.benchmark_fragmentation import ExperimentConfig, run_single, write_summary
from experiments.environment import WorkloadGenerator


class BenchmarkHarnessTests(unittest.TestCase):
    def test_summary_contains_core_metrics(self) -> None:
        config = ExperimentConfig(label="test_config", block_sizes=[64, 32, 128], steps=60, max_size=80)
        summary = run_single(config, seed=123)
        self.assertEqual(summary["allocations"] + summary["frees"] + summary["missed_frees"], 60)
        self.assertEqual(
            summary["immediate"] + summary["queued"] + summary["queue_full"] + summary["capacity_rejections"],
            summary["allocations"],
        )
        self.assertIn("avg_fragmentation", summary)
        self.assertGreaterEqual(summary["peak_queue"], summary["final_waiting"])
        self.assertLessEqual(summary["final_blocks"], config.max_blocks)

    def test_runs_are_reproducible_and_write_csv(self) -> None:
        config = ExperimentConfig(label="repro", steps=40)
        with tempfile.TemporaryDirectory() as tmpdir:
            first = run_single(config, seed=5, trajectory_dir=tmpdir)
            second = run_single(config, seed=5)
            self.assertEqual(first, second)
            trajectory = Path(tmpdir) / "repro_seed5.csv"
            self.assertEqual(len(trajectory.read_text().splitlines()), 41)

            summary_path = Path(tmpdir) / "out" / "summary.csv"
            write_summary(str(summary_path), [first, second])
            self.assertEqual(len(summary_path.read_text().splitlines()), 3)


class WorkloadGeneratorTests(unittest.TestCase):
    def test_frees_only_outstanding_processes(self) -> None:
        workload = WorkloadGenerator(seed=1, min_size=2, max_size=4)
        issued = set()
        freed = set()
        for _ in range(100):
            operation = workload.next_operation()
            if operation.kind == "alloc":
                self.assertTrue(2 <= operation.size <= 4)
                issued.add(operation.process_id)
            else:
                self.assertIn(operation.process_id, issued)
                self.assertNotIn(operation.process_id, freed)
                freed.add(operation.process_id)

    def test_rejects_bad_size_range(self) -> None:
        with self.assertRaises(ValueError):
            WorkloadGenerator(min_size=0)
        with self.assertRaises(ValueError):
            WorkloadGenerator(min_size=10, max_size=5)


if __name__ == "__main__":
    unittest.main()
