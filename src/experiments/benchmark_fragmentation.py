from __future__ import annotations

import argparse
import csv
import os
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional

from firstfit_memory import (
    AllocationError,
    ProcessNotFound,
    QueueFull,
    SystemLimits,
    create_system,
)
from experiments.environment import WorkloadGenerator
from experiments.instrumentation import MemoryProfiler


@dataclass
class ExperimentConfig:
    label: str
    block_sizes: List[int] = field(default_factory=lambda: [256, 128, 64, 512])
    steps: int = 200
    min_size: int = 4
    max_size: int = 96
    free_probability: float = 0.4
    max_blocks: int = 50
    max_processes: int = 50
    max_wait_queue: int = 50


def run_single(
    config: ExperimentConfig,
    seed: int,
    *,
    trajectory_dir: Optional[str] = None,
    profiler: Optional[MemoryProfiler] = None,
) -> Dict[str, float]:
    workload = WorkloadGenerator(
        seed=seed,
        min_size=config.min_size,
        max_size=config.max_size,
        free_probability=config.free_probability,
    )
    system = create_system(
        config.block_sizes,
        limits=SystemLimits(
            max_blocks=config.max_blocks,
            max_processes=config.max_processes,
            max_wait_queue=config.max_wait_queue,
        ),
        profiler=profiler,
    )

    allocations = 0
    immediate = 0
    queued = 0
    queue_full = 0
    capacity_rejections = 0
    frees = 0
    missed_frees = 0
    peak_queue = 0

    fragmentation_sum = 0.0
    heap_used_sum = 0.0
    observations = 0

    trajectory_rows: List[Dict[str, float]] = []

    for step in range(1, config.steps + 1):
        operation = workload.next_operation()
        if operation.kind == "alloc":
            allocations += 1
            try:
                result = system.allocate(operation.process_id, operation.size)
            except QueueFull:
                queue_full += 1
                workload.forget(operation.process_id)
            except AllocationError:
                capacity_rejections += 1
                workload.forget(operation.process_id)
            else:
                if result.allocated:
                    immediate += 1
                else:
                    queued += 1
        else:
            try:
                system.free(operation.process_id)
                frees += 1
            except ProcessNotFound:
                # Still waiting in the queue; only active processes can be freed.
                missed_frees += 1

        stats = system.stats()
        peak_queue = max(peak_queue, stats["waiting"])
        fragmentation_sum += stats["fragmentation"]
        heap_used_sum += stats["heap_used"]
        observations += 1
        trajectory_rows.append(
            {
                "step": step,
                "operation": operation.kind,
                "process_id": operation.process_id,
                "size": operation.size,
                "blocks": stats["blocks"],
                "active_processes": stats["active_processes"],
                "waiting": stats["waiting"],
                "heap_used": stats["heap_used"],
                "heap_free": stats["heap_free"],
                "fragmentation": stats["fragmentation"],
            }
        )

    if trajectory_dir and trajectory_rows:
        os.makedirs(trajectory_dir, exist_ok=True)
        trajectory_path = os.path.join(trajectory_dir, f"{config.label}_seed{seed}.csv")
        with open(trajectory_path, "w", newline="") as handle:
            writer = csv.DictWriter(handle, fieldnames=list(trajectory_rows[0].keys()))
            writer.writeheader()
            writer.writerows(trajectory_rows)

    final_stats = system.stats()
    summary: Dict[str, float] = {
        "config": config.label,
        "seed": seed,
        "steps": config.steps,
        "allocations": allocations,
        "immediate": immediate,
        "queued": queued,
        "queue_full": queue_full,
        "capacity_rejections": capacity_rejections,
        "frees": frees,
        "missed_frees": missed_frees,
        "promotions": final_stats["promotions"],
        "peak_queue": peak_queue,
        "immediate_ratio": immediate / allocations if allocations else 0.0,
        "avg_heap_used": heap_used_sum / observations if observations else 0.0,
        "avg_fragmentation": fragmentation_sum / observations if observations else 0.0,
        "final_blocks": final_stats["blocks"],
        "final_waiting": final_stats["waiting"],
        "final_fragmentation": final_stats["fragmentation"],
    }
    return summary


def build_default_configs(args: argparse.Namespace) -> List[ExperimentConfig]:
    configs = [
        ExperimentConfig(label="mixed_blocks", block_sizes=[256, 128, 64, 512]),
        ExperimentConfig(label="single_block", block_sizes=[960]),
        ExperimentConfig(label="many_small", block_sizes=[60] * 16),
    ]
    for config in configs:
        config.steps = args.steps
        config.min_size = args.min_size
        config.max_size = args.max_size
        config.free_probability = args.free_probability
        config.max_blocks = args.max_blocks
        config.max_wait_queue = args.max_wait_queue
    return configs


def write_summary(path: str, records: Iterable[Dict[str, float]]) -> None:
    records = list(records)
    if not records:
        return
    directory = os.path.dirname(path)
    if directory:
        os.makedirs(directory, exist_ok=True)
    with open(path, "w", newline="") as handle:
        writer = csv.DictWriter(handle, fieldnames=list(records[0].keys()))
        writer.writeheader()
        writer.writerows(records)


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Measure first-fit fragmentation under synthetic workloads.")
    parser.add_argument("--steps", type=int, default=200, help="Operations per run.")
    parser.add_argument("--seeds", type=int, default=5, help="Number of random seeds to evaluate.")
    parser.add_argument("--seed-offset", type=int, default=0, help="Offset applied to generated seeds.")
    parser.add_argument("--output", type=str, default="results/fragmentation.csv", help="CSV summary path.")
    parser.add_argument(
        "--trajectory-dir",
        type=str,
        default=None,
        help="Optional directory to write per-run trajectory CSV files.",
    )
    parser.add_argument("--min-size", type=int, default=4, help="Smallest request size.")
    parser.add_argument("--max-size", type=int, default=96, help="Largest request size.")
    parser.add_argument("--free-probability", type=float, default=0.4, help="Chance that a step frees.")
    parser.add_argument("--max-blocks", type=int, default=50, help="Block table bound.")
    parser.add_argument("--max-wait-queue", type=int, default=50, help="Wait queue bound.")
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> None:
    args = parse_args(argv)
    configs = build_default_configs(args)
    seeds = [args.seed_offset + index for index in range(args.seeds)]

    summaries: List[Dict[str, float]] = []
    for config in configs:
        for seed in seeds:
            summaries.append(run_single(config, seed, trajectory_dir=args.trajectory_dir))

    write_summary(args.output, summaries)

    for summary in summaries:
        print(
            f"[{summary['config']} seed={summary['seed']}] "
            f"immediate={summary['immediate_ratio']:.2f} queued={int(summary['queued'])} "
            f"promotions={int(summary['promotions'])} peak_queue={int(summary['peak_queue'])} "
            f"avg_fragmentation={summary['avg_fragmentation']:.3f}"
        )


if __name__ == "__main__":
    main()
