#!/usr/bin/env python3
"""Review pending link submissions from a terminal."""

from __future__ import annotations

import argparse
import getpass
import os
import sys
from collections.abc import Callable
from typing import Any

import httpx

from navsite.services.pagination import PageHistory

PROMPT = "[n]ext [p]rev [a ID] approve [r ID] reject [q]uit > "


class ReviewApiError(RuntimeError):
    pass


class ReviewClient:
    def __init__(self, client: httpx.Client, base_path: str = "") -> None:
        self.client = client
        self.base_path = base_path.rstrip("/")

    def login(self, password: str) -> None:
        self._call("POST", "/api/auth/login", json={"password": password})

    def list_page(self, page_token: str | None, page_size: int) -> dict[str, Any]:
        params: dict[str, Any] = {"page_size": page_size}
        if page_token:
            params["page_token"] = page_token
        return self._call("GET", "/api/pending-links", params=params)

    def approve(self, link_id: str) -> dict[str, Any]:
        return self._call("POST", f"/api/pending-links/{link_id}/approve")

    def reject(self, link_id: str) -> dict[str, Any]:
        return self._call("POST", f"/api/pending-links/{link_id}/reject")

    def _call(self, method: str, path: str, **kwargs: Any) -> dict[str, Any]:
        response = self.client.request(method, f"{self.base_path}{path}", **kwargs)
        try:
            payload = response.json()
        except ValueError:
            payload = {}
        if response.status_code >= 400 or not payload.get("success", False):
            message = payload.get("message") or f"HTTP {response.status_code}"
            raise ReviewApiError(message)
        return payload


def render_page(payload: dict[str, Any], page_number: int) -> str:
    items = payload.get("data") or []
    lines = [f"-- page {page_number} ({len(items)} pending) --"]
    for item in items:
        lines.append(
            f"{item.get('id')}  [{item.get('category', '')}] {item.get('name', '')}  {item.get('url', '')}"
        )
    if not items:
        lines.append("(nothing to review)")
    return "\n".join(lines)


def load_page(api: ReviewClient, history: PageHistory, page_size: int) -> str:
    payload = api.list_page(history.current, page_size)
    pagination = payload.get("pagination") or {}
    history.record(has_more=bool(pagination.get("hasMore")), next_token=pagination.get("pageToken"))
    return render_page(payload, history.index + 1)


def run_interactive(
    api: ReviewClient,
    *,
    page_size: int,
    read: Callable[[str], str] = input,
    write: Callable[[str], None] = print,
) -> None:
    history = PageHistory()
    write(load_page(api, history, page_size))
    while True:
        try:
            command = read(PROMPT).strip()
        except EOFError:
            return
        action, _, argument = command.partition(" ")
        argument = argument.strip()
        try:
            if action in {"q", "quit"}:
                return
            if action in {"n", "next"}:
                if not history.can_go_forward:
                    write("no next page")
                    continue
                history.advance()
            elif action in {"p", "prev"}:
                if not history.can_go_back:
                    write("already on the first page")
                    continue
                history.back()
            elif action in {"a", "approve"} and argument:
                write(api.approve(argument).get("message", "approved"))
            elif action in {"r", "reject"} and argument:
                write(api.reject(argument).get("message", "rejected"))
            else:
                write("unknown command")
                continue
            write(load_page(api, history, page_size))
        except ReviewApiError as exc:
            write(f"error: {exc}")


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Review pending link submissions.")
    parser.add_argument("--base-url", default=os.getenv("NAV_REVIEW_BASE_URL", "http://127.0.0.1:8000"))
    parser.add_argument("--base-path", default=os.getenv("NAV_BASE_PATH", ""))
    parser.add_argument("--page-size", type=int, default=20)
    parser.add_argument("--password", default=os.getenv("NAV_ADMIN_PASSWORD"))
    subcommands = parser.add_subparsers(dest="command")
    subcommands.add_parser("browse", help="page through the queue interactively (default)")
    approve_parser = subcommands.add_parser("approve", help="approve one pending link")
    approve_parser.add_argument("link_id")
    reject_parser = subcommands.add_parser("reject", help="reject one pending link")
    reject_parser.add_argument("link_id")
    args = parser.parse_args(argv)

    password = args.password or getpass.getpass("admin password: ")
    with httpx.Client(base_url=args.base_url, timeout=30.0) as client:
        api = ReviewClient(client, base_path=args.base_path)
        try:
            api.login(password)
            if args.command == "approve":
                print(api.approve(args.link_id).get("message", "approved"))
            elif args.command == "reject":
                print(api.reject(args.link_id).get("message", "rejected"))
            else:
                run_interactive(api, page_size=args.page_size)
        except ReviewApiError as exc:
            print(f"error: {exc}", file=sys.stderr)
            return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
