"""WP-CLI backed document store.

Drives a real WordPress install through the ``wp`` binary. Invariants:

- Every call goes through ``_wp_run``; callers never build flags.
- ``--path``, ``--no-color`` and ``--quiet`` are always appended, read
  commands also get ``--format=json``.
- Large values (``_elementor_data``) are passed on STDIN, never on argv.
- PHP notices and ANSI codes are scrubbed before JSON is parsed.
"""

from __future__ import annotations

import json
import logging
import re
import subprocess
import time
from pathlib import Path
from typing import Any

from elementor_abilities.core.errors import StoreError
from elementor_abilities.store.base import (
    TEMPLATE_POST_TYPE,
    TEMPLATE_TYPE_META_KEY,
    DocumentStore,
    PostRecord,
    TemplateRecord,
)

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 120

# ── Noise filters ───────────────────────────────────────────────────────────────
ANSI_RE = re.compile(r"\x1B\[[0-?]*[ -/]*[@-~]")
NOISE_PREFIXES = (
    "PHP Warning:",
    "PHP Notice:",
    "PHP Deprecated:",
    "PHP Fatal error:",
    "Warning:",
    "Notice:",
    "Deprecated:",
)


def _clean_output(text: str) -> str:
    lines = []
    for line in ANSI_RE.sub("", text or "").splitlines():
        stripped = line.strip()
        if not stripped or stripped.startswith(NOISE_PREFIXES):
            continue
        lines.append(line)
    return "\n".join(lines).strip()


def _parse_json_output(text: str) -> Any:
    """Parse cleaned WP-CLI output; None when empty or not JSON."""
    cleaned = _clean_output(text)
    if not cleaned:
        return None
    try:
        return json.loads(cleaned)
    except ValueError:
        return None


class WPCLIStore(DocumentStore):
    """Store talking to WordPress through WP-CLI subprocess calls.

    Args:
        site_path: WordPress root directory (passed as ``--path``).
        wp_cli: ``wp`` binary to run.
        timeout: Per-call timeout in seconds.
        run_as: Optional system user; commands are prefixed with
            ``sudo -u <user>`` when set.
    """

    name = "wp-cli"

    def __init__(
        self,
        site_path: Path,
        wp_cli: str = "wp",
        timeout: int = DEFAULT_TIMEOUT,
        run_as: str | None = None,
    ) -> None:
        self.site_path = Path(site_path)
        self.wp_cli = wp_cli
        self.timeout = timeout
        self.run_as = run_as

    # ─────────────────────────────────────────────────────────────────────
    # Command plumbing
    # ─────────────────────────────────────────────────────────────────────

    def _base_argv(self) -> list[str]:
        argv = [self.wp_cli, f"--path={self.site_path}"]
        if self.run_as:
            return ["sudo", "-u", self.run_as] + argv
        return argv

    def _wp_run(
        self,
        parts: list[str],
        stdin: str | None = None,
        read: bool = False,
    ) -> tuple[bool, str, str]:
        """Run one ``wp`` command.

        Returns:
            ``(ok, stdout, stderr)``.

        Raises:
            StoreError: When ``wp`` cannot be started or times out.
        """
        parts = list(parts)
        if read and not any(p.startswith("--format=") for p in parts):
            parts.append("--format=json")
        for flag in ("--no-color", "--quiet"):
            if flag not in parts:
                parts.append(flag)
        args = self._base_argv() + parts
        display = "wp " + " ".join(parts)

        t0 = time.monotonic()
        try:
            proc = subprocess.run(
                args,
                input=stdin,
                text=True,
                capture_output=True,
                timeout=self.timeout,
                encoding="utf-8",
                errors="replace",
            )
        except subprocess.TimeoutExpired as e:
            dt = time.monotonic() - t0
            logger.error("%s timeout after %.1fs", display, dt)
            raise StoreError(f"WP-CLI timed out after {dt:.1f}s") from e
        except OSError as e:
            logger.error("%s could not start: %s", display, e)
            raise StoreError(f"WP-CLI could not be started: {e}") from e

        dt = time.monotonic() - t0
        ok = proc.returncode == 0
        if ok:
            logger.debug("PASS: %s (%.1fs)", display, dt)
        else:
            logger.debug(
                "%s exit=%s stderr=%s", display, proc.returncode, _clean_output(proc.stderr)
            )
        return ok, proc.stdout or "", proc.stderr or ""

    def _wp_write(self, parts: list[str], stdin: str | None = None) -> None:
        ok, _, err = self._wp_run(parts, stdin=stdin)
        if not ok:
            message = _clean_output(err) or "unknown error"
            logger.error("wp %s failed: %s", " ".join(parts[:3]), message)
            raise StoreError(f"WP-CLI write failed: {message}")

    # ─────────────────────────────────────────────────────────────────────
    # Primitives
    # ─────────────────────────────────────────────────────────────────────

    def get_post(self, post_id: int) -> PostRecord | None:
        ok, out, _ = self._wp_run(
            [
                "post",
                "get",
                str(int(post_id)),
                "--fields=ID,post_title,post_type,post_status,post_date,post_modified",
            ],
            read=True,
        )
        if not ok:
            return None
        data = _parse_json_output(out)
        if not isinstance(data, dict):
            return None
        return PostRecord(
            id=int(data.get("ID", post_id)),
            title=data.get("post_title", ""),
            post_type=data.get("post_type", ""),
            status=data.get("post_status", ""),
            date=data.get("post_date", ""),
            modified=data.get("post_modified", ""),
        )

    def get_meta(self, post_id: int, key: str) -> Any:
        ok, out, _ = self._wp_run(["post", "meta", "get", str(int(post_id)), key], read=True)
        if not ok:
            return None
        cleaned = _clean_output(out)
        if not cleaned:
            return None
        try:
            value = json.loads(cleaned)
        except ValueError as e:
            raise StoreError(
                f"Unreadable WP-CLI output for {key} on post {post_id}", id=post_id
            ) from e
        return None if value == "" else value

    def update_meta(self, post_id: int, key: str, value: Any) -> None:
        parts = ["post", "meta", "update", str(int(post_id)), key]
        if isinstance(value, str):
            self._wp_write(parts, stdin=value)
            return
        self._wp_write(parts + ["--format=json"], stdin=json.dumps(value, ensure_ascii=False))

    def delete_meta(self, post_id: int, key: str) -> None:
        # A missing key makes WP-CLI exit non-zero; that is not a failure here.
        self._wp_run(["post", "meta", "delete", str(int(post_id)), key])

    def delete_meta_everywhere(self, key: str) -> None:
        self._wp_write(["eval", f"delete_post_meta_by_key({json.dumps(key)});"])

    def touch_post(self, post_id: int) -> None:
        now = time.strftime("%Y-%m-%d %H:%M:%S")
        self._wp_write(["post", "update", str(int(post_id)), f"--post_modified={now}"])

    def permalink(self, post_id: int) -> str:
        ok, out, _ = self._wp_run(["eval", f"echo get_permalink({int(post_id)});"])
        return _clean_output(out) if ok else ""

    def query_templates(self, template_type: str | None, limit: int) -> list[TemplateRecord]:
        parts = [
            "post",
            "list",
            f"--post_type={TEMPLATE_POST_TYPE}",
            "--post_status=publish",
            f"--posts_per_page={int(limit)}",
            "--orderby=title",
            "--order=ASC",
            "--fields=ID,post_title,post_date,post_modified",
        ]
        if template_type is not None:
            parts += [f"--meta_key={TEMPLATE_TYPE_META_KEY}", f"--meta_value={template_type}"]
        ok, out, err = self._wp_run(parts, read=True)
        if not ok:
            raise StoreError(f"WP-CLI template query failed: {_clean_output(err)}")
        rows = _parse_json_output(out) or []
        if not isinstance(rows, list):
            raise StoreError("WP-CLI template query returned unexpected output")
        templates = []
        for row in rows:
            try:
                template_id = int(row["ID"])
            except (KeyError, TypeError, ValueError) as e:
                raise StoreError(f"WP-CLI template query returned a malformed row: {row!r}") from e
            templates.append(
                TemplateRecord(
                    id=template_id,
                    title=row.get("post_title", ""),
                    type=self.get_meta(template_id, TEMPLATE_TYPE_META_KEY) or "unknown",
                    created_at=row.get("post_date", ""),
                    modified_at=row.get("post_modified", ""),
                )
            )
        return templates

    def get_option(self, name: str) -> Any:
        ok, out, _ = self._wp_run(["option", "get", name], read=True)
        if not ok:
            return None
        return _parse_json_output(out)

    def flush_css(self) -> bool:
        ok, _, _ = self._wp_run(["elementor", "flush-css"])
        return ok
