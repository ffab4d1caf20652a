# /*
# Copyright 2026 The Grove Authors.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
# */

"""Status subcommands (show, history)."""

from __future__ import annotations

import typer
from rich.table import Table

from eks_tester import console
from eks_tester.commands.options import NAME, STATUS_FILE, configs
from eks_tester.orchestrator import load_status

app = typer.Typer(help="Inspect the persisted status record.")


@app.command("show")
def show(
    name: str | None = NAME,
    status_file: str | None = STATUS_FILE,
) -> None:
    """Print one row per tracked resource."""
    tester_cfg, _, _ = configs(name, status_file=status_file)
    status = load_status(tester_cfg)
    if not status.resources:
        console.print(f"[yellow]\u2139\ufe0f  No resources recorded in {tester_cfg.status_file}[/yellow]")
        return

    table = Table(title=f"Environment {tester_cfg.name}")
    for column in ("Kind", "Name", "Created", "Status", "Handle", "Endpoint", "Create took", "Delete took"):
        table.add_column(column)
    for kind, res in status.resources.items():
        table.add_row(
            kind,
            res.name,
            "yes" if res.created else "no",
            res.status,
            res.handle or res.external_ref,
            res.endpoint.url if res.endpoint else "",
            str(res.create_took or ""),
            str(res.delete_took or ""),
        )
    console.print(table)


@app.command("history")
def history(
    name: str | None = NAME,
    status_file: str | None = STATUS_FILE,
    last: int = typer.Option(20, "--last", min=1, help="Number of entries to show"),
) -> None:
    """Print the most recent status messages."""
    tester_cfg, _, _ = configs(name, status_file=status_file)
    for entry in load_status(tester_cfg).history[-last:]:
        console.print(f"{entry.time:%Y-%m-%d %H:%M:%S} {entry.message}")
