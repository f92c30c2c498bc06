from __future__ import annotations

from typing import Any, Dict, List

from firstfit_memory.config import SystemLimits

SEPARATOR = "---------------------------------------------"


def format_layout(snapshot: Dict[str, List[Dict[str, Any]]]) -> str:
    """Render a system snapshot as the block / process / queue listing shown by the shell."""
    lines = ["Memory Blocks:"]
    for number, block in enumerate(snapshot["blocks"], start=1):
        state = "Free" if block["free"] else "Allocated"
        lines.append(
            f"Block {number}: Start_address={block['start']}, Size={block['size']}KB, {state}"
        )

    lines.append("")
    lines.append("Active Processes:")
    if snapshot["active_processes"]:
        for process in snapshot["active_processes"]:
            lines.append(
                f"Process {process['id']}: Address={process['address']}, Size={process['size']}KB"
            )
    else:
        lines.append("No active processes")

    lines.append("")
    lines.append("Waiting Queue:")
    if snapshot["waiting"]:
        for entry in snapshot["waiting"]:
            lines.append(f"Process {entry['process_id']}: Waiting for {entry['size']}KB")
    else:
        lines.append("No processes waiting")

    lines.append("")
    lines.append(SEPARATOR)
    return "\n".join(lines) + "\n"


def format_limits(limits: SystemLimits) -> str:
    return "\n".join(
        [
            "System Limitations:",
            f"- Maximum Memory Blocks: {limits.max_blocks}",
            f"- Maximum Processes: {limits.max_processes}",
            f"- Maximum Waiting Queue Size: {limits.max_wait_queue}",
            SEPARATOR,
        ]
    )
