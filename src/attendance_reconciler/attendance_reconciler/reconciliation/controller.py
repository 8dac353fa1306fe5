from __future__ import annotations

import json
import logging
import threading
from datetime import date

import click
from flask import Flask, jsonify, request

from ..common.datetime_utils import parse_iso_date
from ..container import Container
from ..core.exceptions import ValidationError
from .service import default_range

logger = logging.getLogger(__name__)


def _optional_date(value) -> date | None:
    if value in (None, ""):
        return None
    try:
        return parse_iso_date(str(value))
    except ValueError:
        raise ValidationError(f"Invalid date {value!r}, expected YYYY-MM-DD")


def _flag(data: dict, name: str) -> bool:
    value = data.get(name, False)
    if not isinstance(value, bool):
        raise ValidationError(f"{name} must be true or false")
    return value


def register(app: Flask, container: Container) -> None:
    # Single in-process run at a time; a second request gets 409.
    run_lock = threading.Lock()

    @app.route("/api/attendance/reprocess", methods=["POST"], endpoint="api_reprocess_attendance")
    def api_reprocess_attendance():
        data = request.get_json(silent=True) or {}
        if not isinstance(data, dict):
            return jsonify({"success": False, "message": "Expected a JSON object"}), 400

        try:
            default_start, default_end = default_range()
            start = _optional_date(data.get("from")) or default_start
            end = _optional_date(data.get("to")) or default_end
            employee_ids = data.get("employee_ids")
            if employee_ids is not None and not isinstance(employee_ids, list):
                raise ValidationError("employee_ids must be a list")
            if employee_ids == []:
                raise ValidationError("employee_ids must not be empty; omit it to process every employee")
            dry_run = _flag(data, "dry_run")
            force = _flag(data, "force")
        except ValidationError as e:
            return jsonify({"success": False, "message": str(e)}), 400

        if not run_lock.acquire(blocking=False):
            return jsonify({"success": False, "message": "A reprocessing run is already in progress"}), 409
        try:
            result = container.reconciliation_processor.reprocess(
                start,
                end,
                employee_ids=employee_ids,
                dry_run=dry_run,
                force=force,
            )
        except ValidationError as e:
            return jsonify({"success": False, "message": str(e)}), 400
        except Exception:
            logger.exception("Reprocessing request failed")
            return jsonify({"success": False, "message": "Reprocessing failed"}), 500
        finally:
            run_lock.release()

        return jsonify({"success": result.succeeded, "summary": result.to_dict()}), 200

    @app.cli.command("reprocess-attendance")
    @click.option("--from", "from_", help="First shift date (YYYY-MM-DD). Defaults to 7 days ago.")
    @click.option("--to", "to", help="Last shift date (YYYY-MM-DD). Defaults to today.")
    @click.option("--dry", is_flag=True, help="Compute and report without writing.")
    @click.option("--force", is_flag=True, help="Also overwrite admin-verified rows.")
    @click.option("--employee", "employee_ids", type=int, multiple=True, help="Limit to these employee ids.")
    def reprocess_attendance(from_, to, dry, force, employee_ids):
        """Re-derive attendance rows from biometric scans."""
        try:
            default_start, default_end = default_range()
            start = _optional_date(from_) or default_start
            end = _optional_date(to) or default_end
            result = container.reconciliation_processor.reprocess(
                start,
                end,
                employee_ids=list(employee_ids) or None,
                dry_run=dry,
                force=force,
            )
        except ValidationError as e:
            raise click.UsageError(str(e))

        mode = "DRY RUN" if result.dry_run else "APPLIED"
        click.echo(f"[{mode}] {result.start.isoformat()} .. {result.end.isoformat()}")
        click.echo(
            f"processed={result.processed} created={result.created} updated={result.updated} "
            f"unchanged={result.unchanged} skipped={result.skipped} review={result.flagged_for_review} "
            f"errors={len(result.errors)}"
        )
        for error in result.errors:
            click.echo(f"  employee {error.employee_id}: {error.error_type}: {error.message}", err=True)
        if result.unresolved_names:
            click.echo(f"unresolved names: {', '.join(result.unresolved_names)}")
        if result.unmatched_scans:
            click.echo(f"unmatched scans: {len(result.unmatched_scans)}")
        click.echo(json.dumps(result.to_dict(), indent=2, ensure_ascii=False))

        if result.errors:
            raise SystemExit(1)
