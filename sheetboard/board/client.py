from __future__ import annotations

import dataclasses
import json
import logging
from typing import Any

import requests

from sheetboard.errors import AuthRejected, RemoteValidation, Unreachable, UnexpectedShape
from sheetboard.models.board import Board, Column, Group, RemoteItem, Workspace
from sheetboard.models.config_models import ApiConfig, fold

from . import queries

logger = logging.getLogger(__name__)

AUTH_ERROR_MARKERS = ("unauthorized", "not authenticated", "authentication", "invalid token")
BOARDS_PAGE_LIMIT = 100


class BoardClient:
    """Stateless wrapper around the board GraphQL endpoint.

    Every public method issues exactly one document (list_items_in_group and
    find_board_by_name issue one per page) and either returns a typed result
    or raises one of AuthRejected / RemoteValidation / Unreachable /
    UnexpectedShape. Nothing is retried here.
    """

    def __init__(
        self,
        api_key: str,
        api: ApiConfig | None = None,
        session: requests.Session | None = None,
    ) -> None:
        if not api_key or not api_key.strip():
            raise AuthRejected("missing API key")
        self.api = api or ApiConfig()
        self.session = session or requests.Session()
        self.session.headers.update(
            {
                "Authorization": f"Bearer {api_key.strip()}",
                "Content-Type": "application/json",
            }
        )
        if self.api.api_version:
            self.session.headers["API-Version"] = self.api.api_version

    # ==================== transport ====================

    def execute(self, document: str, variables: dict[str, Any] | None = None) -> dict[str, Any]:
        """POST one GraphQL document and return its ``data`` object."""
        payload: dict[str, Any] = {"query": document}
        if variables:
            payload["variables"] = variables
        try:
            response = self.session.post(self.api.url, json=payload, timeout=self.api.timeout_seconds)
        except requests.RequestException as e:
            raise Unreachable(f"board API unreachable: {e}") from e

        status = response.status_code
        if status in (401, 403):
            raise AuthRejected(f"board API rejected the credential (HTTP {status})")
        if status >= 500:
            raise Unreachable(f"board API unavailable (HTTP {status})")

        try:
            body = response.json()
        except ValueError as e:
            if status >= 400:
                raise RemoteValidation(f"board API returned HTTP {status}: {response.text[:200]}") from e
            raise UnexpectedShape(f"board API returned a non-JSON body (HTTP {status})") from e

        if not isinstance(body, dict):
            raise UnexpectedShape("board API returned a non-object body")

        self._raise_for_errors(body, status)

        data = body.get("data")
        if not isinstance(data, dict):
            raise UnexpectedShape("board API response has no data object")
        return data

    @staticmethod
    def _raise_for_errors(body: dict[str, Any], status: int) -> None:
        messages: list[str] = []
        for err in body.get("errors") or []:
            if isinstance(err, dict):
                messages.append(str(err.get("message", err)))
            else:
                messages.append(str(err))
        if body.get("error_message"):
            messages.append(str(body["error_message"]))
        if body.get("error_code"):
            messages.append(str(body["error_code"]))

        if not messages and status < 400:
            return
        text = "; ".join(messages) or f"HTTP {status}"
        if any(marker in text.lower() for marker in AUTH_ERROR_MARKERS):
            raise AuthRejected(f"board API rejected the credential: {text}")
        raise RemoteValidation(f"board API rejected the request: {text}")

    @staticmethod
    def _dig(data: Any, *path: str | int) -> Any:
        node = data
        for step in path:
            try:
                node = node[step]
            except (KeyError, IndexError, TypeError) as e:
                where = ".".join(str(p) for p in path)
                raise UnexpectedShape(f"board API response missing '{where}'") from e
        return node

    def _first_board(self, data: dict[str, Any]) -> dict[str, Any]:
        boards = self._dig(data, "boards")
        if not boards:
            raise RemoteValidation("board not found or not accessible")
        return boards[0]

    # ==================== groups ====================

    def list_groups(self, board_id: str) -> list[Group]:
        data = self.execute(queries.LIST_GROUPS, {"boardId": [str(board_id)]})
        groups = self._dig(self._first_board(data), "groups") or []
        return [Group(id=str(g["id"]), title=str(g["title"])) for g in groups]

    def create_group(self, board_id: str, title: str) -> str:
        data = self.execute(queries.CREATE_GROUP, {"boardId": str(board_id), "groupName": title})
        return str(self._dig(data, "create_group", "id"))

    def archive_group(self, board_id: str, group_id: str) -> str:
        data = self.execute(queries.ARCHIVE_GROUP, {"boardId": str(board_id), "groupId": group_id})
        return str(self._dig(data, "archive_group", "id"))

    # ==================== columns ====================

    def list_columns(self, board_id: str) -> list[Column]:
        data = self.execute(queries.LIST_COLUMNS, {"boardId": [str(board_id)]})
        columns = self._dig(self._first_board(data), "columns") or []
        return [Column(id=str(c["id"]), title=str(c["title"])) for c in columns]

    def create_column(self, board_id: str, title: str, column_type: str = "text") -> str:
        data = self.execute(
            queries.CREATE_COLUMN,
            {"boardId": str(board_id), "title": title, "columnType": column_type},
        )
        return str(self._dig(data, "create_column", "id"))

    def delete_column(self, board_id: str, column_id: str) -> str:
        data = self.execute(queries.DELETE_COLUMN, {"boardId": str(board_id), "columnId": column_id})
        return str(self._dig(data, "delete_column", "id"))

    # ==================== items ====================

    def list_items_in_group(self, board_id: str, group_id: str) -> list[RemoteItem]:
        """All items of one group.

        The listing is board-wide and cursor paginated: pages are fetched until
        the cursor comes back empty, concatenated, then filtered by group. A
        failing page raises and discards what was fetched so far.
        """
        variables: dict[str, Any] = {"boardId": [str(board_id)], "limit": self.api.page_size}
        raw_items: list[dict[str, Any]] = []
        cursor: str | None = None
        pages = 0
        while True:
            if cursor:
                variables["cursor"] = cursor
            else:
                variables.pop("cursor", None)
            data = self.execute(queries.ITEMS_PAGE, variables)
            page = self._dig(self._first_board(data), "items_page")
            page_items = self._dig(page, "items") or []
            pages += 1
            logger.debug(f"fetched page {pages}: {len(page_items)} items")
            raw_items.extend(page_items)
            cursor = page.get("cursor")
            if not cursor:
                break

        items = [self._to_item(raw) for raw in raw_items]
        in_group = [item for item in items if item.group_id == str(group_id)]
        logger.debug(f"items fetched={len(items)} pages={pages} in_group[{group_id}]={len(in_group)}")
        return in_group

    def _to_item(self, raw: dict[str, Any]) -> RemoteItem:
        fields: dict[str, str] = {}
        for cv in raw.get("column_values") or []:
            column = cv.get("column") or {}
            title = str(column.get("title") or "").strip()
            if not title:
                continue
            fields[title] = (cv.get("text") or "").strip()
        group = raw.get("group") or {}
        return RemoteItem(
            id=str(self._dig(raw, "id")),
            name=str(raw.get("name") or ""),
            group_id=str(group["id"]) if group.get("id") is not None else None,
            fields=fields,
        )

    def create_item(self, board_id: str, group_id: str, name: str) -> str:
        data = self.execute(
            queries.CREATE_ITEM,
            {"boardId": str(board_id), "groupId": group_id, "itemName": name},
        )
        return str(self._dig(data, "create_item", "id"))

    def update_item_fields(self, board_id: str, item_id: str, fields: dict[str, str]) -> str:
        """Set several column values in one call (column id -> text)."""
        data = self.execute(
            queries.UPDATE_ITEM_FIELDS,
            {
                "boardId": str(board_id),
                "itemId": str(item_id),
                "columnValues": json.dumps(fields, ensure_ascii=False),
            },
        )
        return str(self._dig(data, "change_multiple_column_values", "id"))

    # ==================== account / boards ====================

    def validate_credentials(self) -> dict[str, Any]:
        """Return the ``me`` object for the credential (raises AuthRejected if invalid)."""
        data = self.execute(queries.ME)
        me = self._dig(data, "me")
        if not me:
            raise AuthRejected("credential is not associated with a user")
        return me

    def list_workspaces(self) -> list[Workspace]:
        data = self.execute(queries.LIST_WORKSPACES)
        return [
            Workspace(id=str(w["id"]), name=str(w["name"]))
            for w in self._dig(data, "workspaces") or []
            if w and w.get("id") is not None
        ]

    def list_workspaces_with_boards(self) -> list[Workspace]:
        """Workspaces with their boards filled in (one boards query per workspace)."""
        return [dataclasses.replace(w, boards=tuple(self.list_boards(w.id))) for w in self.list_workspaces()]

    def list_boards(self, workspace_id: str | None = None) -> list[Board]:
        boards: list[Board] = []
        page = 1
        while True:
            variables: dict[str, Any] = {"limit": BOARDS_PAGE_LIMIT, "page": page}
            if workspace_id:
                variables["workspaceIds"] = [str(workspace_id)]
            data = self.execute(queries.LIST_BOARDS, variables)
            chunk = self._dig(data, "boards") or []
            boards.extend(Board(id=str(b["id"]), name=str(b["name"])) for b in chunk)
            if len(chunk) < BOARDS_PAGE_LIMIT:
                return boards
            page += 1

    def find_board_by_name(self, name: str, workspace_id: str | None = None) -> Board | None:
        target = fold(name)
        for board in self.list_boards(workspace_id):
            if fold(board.name) == target:
                return board
        return None

    def create_board(self, name: str, workspace_id: str | None = None) -> str:
        variables: dict[str, Any] = {"boardName": name}
        if workspace_id:
            variables["workspaceId"] = str(workspace_id)
        data = self.execute(queries.CREATE_BOARD, variables)
        return str(self._dig(data, "create_board", "id"))

    def ensure_board(self, name: str, workspace_id: str | None = None) -> str:
        """Board id for name, creating a private board when none matches."""
        existing = self.find_board_by_name(name, workspace_id)
        if existing is not None:
            logger.info(f'board "{name}" already exists (id={existing.id})')
            return existing.id
        board_id = self.create_board(name, workspace_id)
        logger.info(f'created board "{name}" (id={board_id})')
        return board_id
