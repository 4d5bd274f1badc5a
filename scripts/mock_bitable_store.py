#!/usr/bin/env python3
"""Local stand-in for the multi-dimensional table API.

Point ``NAV_STORE_BASE_URL`` at it to run the service without real credentials.
Tables are created on first use and live in memory.
"""

from __future__ import annotations

import argparse
import itertools
import json
import re
import threading
import time
from http import HTTPStatus
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from urllib.parse import parse_qs, urlparse

TOKEN = "mock-tenant-token"
RECORDS_RE = re.compile(r"^/open-apis/bitable/v1/apps/([^/]+)/tables/([^/]+)/records(?:/([^/]+))?$")
TABLES_RE = re.compile(r"^/open-apis/bitable/v1/apps/([^/]+)/tables$")
RECORD_NOT_FOUND = 1254043

_lock = threading.Lock()
_tables: dict[tuple[str, str], dict[str, dict[str, object]]] = {}
_ids = itertools.count(1)


def _table(app_token: str, table_id: str) -> dict[str, dict[str, object]]:
    return _tables.setdefault((app_token, table_id), {})


class MockBitableHandler(BaseHTTPRequestHandler):
    server_version = "MockBitable/1.0"

    def do_GET(self) -> None:  # noqa: N802 - stdlib handler signature
        parsed = urlparse(self.path)
        if parsed.path == "/healthz":
            self._write_json(HTTPStatus.OK, {"status": "ok"})
            return
        match = self._authorized_match(parsed.path)
        if match is None:
            return
        app_token, table_id, record_id = match.groups()
        with _lock:
            table = _table(app_token, table_id)
            if record_id:
                record = table.get(record_id)
                if record is None:
                    self._write_error(RECORD_NOT_FOUND, "RecordIdNotFound")
                    return
                self._write_data({"record": record})
                return

            query = parse_qs(parsed.query)
            page_size = int(query.get("page_size", ["20"])[0])
            offset = int(query.get("page_token", ["0"])[0] or 0)
            records = list(table.values())
            window = records[offset : offset + page_size]
            has_more = offset + page_size < len(records)
            self._write_data(
                {
                    "items": window,
                    "has_more": has_more,
                    "page_token": str(offset + page_size) if has_more else None,
                    "total": len(records),
                }
            )

    def do_POST(self) -> None:  # noqa: N802 - stdlib handler signature
        path = urlparse(self.path).path
        body = self._read_json()
        if path == "/open-apis/auth/v3/tenant_access_token/internal":
            self._write_json(HTTPStatus.OK, {"code": 0, "msg": "ok", "tenant_access_token": TOKEN, "expire": 7200})
            return

        tables_match = TABLES_RE.match(path)
        if tables_match is not None:
            if not self._check_token():
                return
            table_id = f"tblmock{next(_ids):04d}"
            with _lock:
                _table(tables_match.group(1), table_id)
            self._write_data({"table_id": table_id})
            return

        match = self._authorized_match(path)
        if match is None:
            return
        app_token, table_id, _ = match.groups()
        record_id = f"recmock{next(_ids):06d}"
        record = {
            "record_id": record_id,
            "fields": body.get("fields") or {},
            "created_time": int(time.time() * 1000),
        }
        with _lock:
            _table(app_token, table_id)[record_id] = record
        self._write_data({"record": record})

    def do_PUT(self) -> None:  # noqa: N802 - stdlib handler signature
        match = self._authorized_match(urlparse(self.path).path)
        if match is None:
            return
        app_token, table_id, record_id = match.groups()
        body = self._read_json()
        with _lock:
            record = _table(app_token, table_id).get(record_id or "")
            if record is None:
                self._write_error(RECORD_NOT_FOUND, "RecordIdNotFound")
                return
            record["fields"] = {**record["fields"], **(body.get("fields") or {})}  # type: ignore[dict-item]
            self._write_data({"record": record})

    def do_DELETE(self) -> None:  # noqa: N802 - stdlib handler signature
        match = self._authorized_match(urlparse(self.path).path)
        if match is None:
            return
        app_token, table_id, record_id = match.groups()
        with _lock:
            if _table(app_token, table_id).pop(record_id or "", None) is None:
                self._write_error(RECORD_NOT_FOUND, "RecordIdNotFound")
                return
        self._write_data({"deleted": True, "record_id": record_id})

    def log_message(self, _: str, *args: object) -> None:
        if args:
            print("mock-bitable:", *args)

    def _authorized_match(self, path: str) -> re.Match[str] | None:
        match = RECORDS_RE.match(path)
        if match is None:
            self._write_json(HTTPStatus.NOT_FOUND, {"code": 404, "msg": "not found"})
            return None
        if not self._check_token():
            return None
        return match

    def _check_token(self) -> bool:
        if self.headers.get("Authorization", "") != f"Bearer {TOKEN}":
            self._write_json(HTTPStatus.BAD_REQUEST, {"code": 99991663, "msg": "Invalid access token"})
            return False
        return True

    def _read_json(self) -> dict[str, object]:
        length = int(self.headers.get("Content-Length") or 0)
        if not length:
            return {}
        try:
            decoded = json.loads(self.rfile.read(length))
        except json.JSONDecodeError:
            return {}
        return decoded if isinstance(decoded, dict) else {}

    def _write_data(self, data: dict[str, object]) -> None:
        self._write_json(HTTPStatus.OK, {"code": 0, "msg": "success", "data": data})

    def _write_error(self, code: int, message: str) -> None:
        self._write_json(HTTPStatus.OK, {"code": code, "msg": message})

    def _write_json(self, status: HTTPStatus, payload: dict[str, object]) -> None:
        raw = json.dumps(payload, ensure_ascii=False).encode("utf-8")
        self.send_response(status.value)
        self.send_header("Content-Type", "application/json; charset=utf-8")
        self.send_header("Content-Length", str(len(raw)))
        self.end_headers()
        self.wfile.write(raw)


def main() -> None:
    parser = argparse.ArgumentParser(description="Mock multi-dimensional table API.")
    parser.add_argument("--host", default="127.0.0.1")
    parser.add_argument("--port", type=int, default=54330)
    args = parser.parse_args()

    server = ThreadingHTTPServer((args.host, args.port), MockBitableHandler)
    print(f"mock-bitable listening on http://{args.host}:{args.port}/open-apis", flush=True)
    try:
        server.serve_forever()
    except KeyboardInterrupt:
        pass
    finally:
        server.server_close()


if __name__ == "__main__":
    main()
