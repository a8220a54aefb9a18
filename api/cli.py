"""
Flask CLI commands.

    flask --app api create-supervisor --file .deployment/supervisor.json
    flask --app api create-supervisor --email a@b.c --first-name Ada --last-name Lovelace
"""
import json
from pathlib import Path

import click
from flask import Flask

from utils.principal import Role


def register_commands(app: Flask) -> None:
    @app.cli.command("create-supervisor")
    @click.option("--file", "file_path", type=click.Path(exists=True, dir_okay=False), help="JSON list of supervisors")
    @click.option("--email")
    @click.option("--first-name")
    @click.option("--last-name")
    @click.option("--password", help="Prompted for when omitted")
    @click.option("--delete-file", is_flag=True, help="Remove the JSON file once imported")
    def create_supervisor(file_path, email, first_name, last_name, password, delete_file):
        """Create Supervisor member accounts."""
        from api.members import create_member

        if file_path:
            entries = json.loads(Path(file_path).read_text(encoding="utf-8"))
            if isinstance(entries, dict):
                entries = [entries]
        elif email and first_name and last_name:
            if not password:
                password = click.prompt("Password", hide_input=True, confirmation_prompt=True)
            entries = [{"email": email, "firstName": first_name, "lastName": last_name, "password": password}]
        else:
            raise click.UsageError("Provide --file or --email/--first-name/--last-name")

        for entry in entries:
            try:
                member = create_member(
                    entry["firstName"],
                    entry["lastName"],
                    entry["email"].strip().lower(),
                    entry["password"],
                    role=Role.SUPERVISOR,
                )
            except KeyError as exc:
                raise click.ClickException(f"supervisor entry is missing {exc}")
            except ValueError as exc:
                click.echo(f"skipped {entry['email']}: {exc}", err=True)
                continue
            click.echo(f"created supervisor {member.email} ({member.id})")

        if file_path and delete_file:
            Path(file_path).unlink()
