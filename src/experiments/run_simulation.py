from __future__ import annotations

import argparse
import logging
from typing import Callable, List, Optional, Sequence, Tuple

from firstfit_memory import (
    AllocationError,
    AllocationManager,
    AllocationResult,
    FreeResult,
    ProcessNotFound,
    QueueFull,
    SystemLimits,
    create_system,
)
from firstfit_memory.config import DEFAULT_MAX_BLOCKS, DEFAULT_MAX_PROCESSES, DEFAULT_MAX_WAIT_QUEUE
from experiments.instrumentation import MemoryProfiler
from experiments.rendering import format_layout, format_limits

Output = Callable[[str], None]
InputFn = Callable[[str], str]

MENU = "--Main Menu--\n1. Allocate Memory\n2. Free Memory\n3. Exit"


class SimulationShell:
    """
    Console front end over one AllocationManager.

    Process ids are handed out incrementally from 1. Allocator errors are
    reported and the session carries on.
    """

    def __init__(self, system: AllocationManager, *, output: Output = print) -> None:
        self.system = system
        self.output = output
        self.next_process_id = 1

    def allocate(self, size: int) -> Optional[AllocationResult]:
        process_id = self.next_process_id
        self.next_process_id += 1
        try:
            result = self.system.allocate(process_id, size)
        except QueueFull as exc:
            self.output(str(exc))
            return None
        except AllocationError as exc:
            self.output(f"Allocation failed for process {process_id}: {exc}")
            return None
        if result.allocated:
            self.output(f"Memory allocated at address {result.address}")
        else:
            self.output("Process added to wait queue")
        return result

    def free(self, process_id: int) -> Optional[FreeResult]:
        try:
            result = self.system.free(process_id)
        except ProcessNotFound as exc:
            self.output(str(exc))
            return None
        self.output(f"Memory for Process {process_id} freed")
        for process in result.promoted:
            self.output(f"Process {process.id} moved from waiting queue and allocated memory")
        return result

    def render(self) -> None:
        self.output(format_layout(self.system.snapshot()))


def parse_ops(text: str) -> List[Tuple[str, int]]:
    """Parse a script such as 'alloc:20,alloc:80,free:1'."""
    ops: List[Tuple[str, int]] = []
    for chunk in text.split(","):
        chunk = chunk.strip()
        if not chunk:
            continue
        kind, sep, value = chunk.partition(":")
        kind = kind.strip().lower()
        if not sep or kind not in ("alloc", "free"):
            raise ValueError(f"Malformed operation {chunk!r}; expected alloc:<size> or free:<id>")
        try:
            amount = int(value)
        except ValueError:
            raise ValueError(f"Malformed operation {chunk!r}; {value!r} is not an integer") from None
        ops.append((kind, amount))
    return ops


def run_script(shell: SimulationShell, ops: Sequence[Tuple[str, int]]) -> None:
    for kind, amount in ops:
        if kind == "alloc":
            shell.allocate(amount)
        else:
            shell.free(amount)
    shell.render()


def prompt_integer(
    prompt: str,
    minimum: int,
    maximum: Optional[int] = None,
    *,
    input_fn: InputFn = input,
    output: Output = print,
) -> int:
    """Ask until the answer is an integer in [minimum, maximum]. EOFError propagates."""
    while True:
        raw = input_fn(prompt).strip()
        try:
            value = int(raw)
        except ValueError:
            value = None
        if value is not None and value >= minimum and (maximum is None or value <= maximum):
            return value
        upper = maximum if maximum is not None else "any larger value"
        output(f"Invalid input. Please enter an integer between {minimum} and {upper}.")


def run_interactive(shell: SimulationShell, *, input_fn: InputFn = input) -> None:
    while True:
        shell.output("\n----First Fit Memory Allocation Simulator----\n")
        shell.render()
        shell.output(MENU)
        try:
            choice = prompt_integer("Enter your choice: ", 1, 3, input_fn=input_fn, output=shell.output)
            if choice == 1:
                size = prompt_integer(
                    "Enter memory size to allocate (in KB): ", 1, input_fn=input_fn, output=shell.output
                )
                shell.allocate(size)
            elif choice == 2:
                if shell.next_process_id == 1:
                    shell.output("No processes have been created yet")
                    continue
                process_id = prompt_integer(
                    "Enter process number (ID) to free memory: ",
                    1,
                    shell.next_process_id - 1,
                    input_fn=input_fn,
                    output=shell.output,
                )
                shell.free(process_id)
            else:
                shell.output("Exiting...")
                return
        except EOFError:
            shell.output("Exiting...")
            return


def read_block_sizes(limits: SystemLimits, *, input_fn: InputFn = input, output: Output = print) -> List[int]:
    count = prompt_integer(
        "Enter the number of memory blocks you want to simulate: ",
        1,
        limits.max_blocks,
        input_fn=input_fn,
        output=output,
    )
    return [
        prompt_integer(f"Enter size of memory block {index} (in KB): ", 1, input_fn=input_fn, output=output)
        for index in range(1, count + 1)
    ]


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Run the first-fit memory allocation simulator.")
    parser.add_argument("--blocks", type=int, nargs="+", default=None, help="Initial block sizes in KB.")
    parser.add_argument(
        "--ops",
        type=str,
        default=None,
        help="Scripted operations, e.g. 'alloc:20,alloc:80,free:1'. Interactive menu when omitted.",
    )
    parser.add_argument("--max-blocks", type=int, default=DEFAULT_MAX_BLOCKS, help="Block table bound.")
    parser.add_argument(
        "--max-processes", type=int, default=DEFAULT_MAX_PROCESSES, help="Active process bound."
    )
    parser.add_argument(
        "--max-wait-queue", type=int, default=DEFAULT_MAX_WAIT_QUEUE, help="Wait queue bound."
    )
    parser.add_argument("--events-dir", type=str, default=None, help="Write allocator events as JSONL/CSV here.")
    parser.add_argument("--run-id", type=str, default="simulation", help="File stem for recorded events.")
    parser.add_argument(
        "--log-level",
        type=str.upper,
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Python logging level.",
    )
    return parser


def main(argv: Optional[Sequence[str]] = None, *, input_fn: InputFn = input, output: Output = print) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(level=args.log_level, format="%(levelname)s %(name)s: %(message)s")

    try:
        limits = SystemLimits(
            max_blocks=args.max_blocks,
            max_processes=args.max_processes,
            max_wait_queue=args.max_wait_queue,
        )
    except AllocationError as exc:
        parser.error(str(exc))
    output(format_limits(limits))

    profiler = MemoryProfiler(run_id=args.run_id, output_dir=args.events_dir) if args.events_dir else None
    try:
        block_sizes = args.blocks or read_block_sizes(limits, input_fn=input_fn, output=output)
        system = create_system(block_sizes, limits=limits, profiler=profiler)
    except EOFError:
        output("Exiting...")
        return 1
    except AllocationError as exc:
        parser.error(str(exc))

    shell = SimulationShell(system, output=output)
    if args.ops is not None:
        try:
            ops = parse_ops(args.ops)
        except ValueError as exc:
            parser.error(str(exc))
        run_script(shell, ops)
    else:
        run_interactive(shell, input_fn=input_fn)

    if profiler:
        profiler.flush()
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
