"""In-memory fake of the remote project service, served through httpx.MockTransport."""

from __future__ import annotations

import json
from datetime import UTC, datetime, timedelta
from typing import Any

import httpx

BASE_URL = "http://planstore.test/api"

_EPOCH = datetime(2026, 1, 1, tzinfo=UTC)


class FakeProjectService:
    """Mimics the ``/projects`` REST endpoints with owner checks and the response envelope.

    Toggles:
        offline: every request fails with a connection error.
        fail_status: every request answers with this status.
        fail_methods: restrict ``fail_status`` to these HTTP methods.
    """

    def __init__(self) -> None:
        self.projects: dict[str, dict[str, Any]] = {}
        self.requests: list[httpx.Request] = []
        self.offline = False
        self.fail_status: int | None = None
        self.fail_methods: set[str] | None = None
        self._next_id = 1
        self._ticks = 0

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    def seed(self, *, user_id: str, name: str, is_public: bool = False, data: dict[str, Any] | None = None) -> str:
        project = self._new_project(
            {
                "userId": user_id,
                "name": name,
                "isPublic": is_public,
                "projectData": data or {"tasks": [{"id": "seed"}]},
            }
        )
        return str(project["_id"])

    def calls(self, method: str) -> list[httpx.Request]:
        return [request for request in self.requests if request.method == method]

    def _now(self) -> str:
        self._ticks += 1
        return (_EPOCH + timedelta(seconds=self._ticks)).isoformat()

    def _new_project(self, body: dict[str, Any]) -> dict[str, Any]:
        project_id = f"{self._next_id:024x}"
        self._next_id += 1
        now = self._now()
        project = {
            "_id": project_id,
            "userId": body["userId"],
            "name": body.get("name") or "Untitled Project",
            "description": body.get("description") or "",
            "isPublic": bool(body.get("isPublic", False)),
            "tags": list(dict.fromkeys(body.get("tags") or [])),
            "projectData": body["projectData"],
            "createdAt": now,
            "updatedAt": now,
        }
        if body.get("originalId"):
            project["originalId"] = body["originalId"]
        self.projects[project_id] = project
        return project

    @staticmethod
    def _ok(data: Any, status: int = 200) -> httpx.Response:
        return httpx.Response(status, json={"success": True, "data": data})

    @staticmethod
    def _error(status: int, message: str) -> httpx.Response:
        return httpx.Response(status, json={"success": False, "message": message})

    @staticmethod
    def _summary(project: dict[str, Any], *, with_owner: bool) -> dict[str, Any]:
        summary = {key: value for key, value in project.items() if key != "projectData"}
        if not with_owner:
            summary.pop("userId", None)
        return summary

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.offline:
            raise httpx.ConnectError("connection refused", request=request)
        if self.fail_status is not None and (self.fail_methods is None or request.method in self.fail_methods):
            return self._error(self.fail_status, "service unavailable")

        path = request.url.path.split("/projects", 1)[1].strip("/")
        parts = [part for part in path.split("/") if part]
        body: dict[str, Any] = json.loads(request.content) if request.content else {}

        if request.method == "POST" and not parts:
            return self._ok(self._new_project(body), status=201)
        if request.method == "POST" and parts == ["import"]:
            return self._ok(self._new_project(body), status=201)
        if request.method == "GET" and parts == ["public"]:
            public = [self._summary(p, with_owner=True) for p in self.projects.values() if p["isPublic"]]
            return self._ok(sorted(public, key=lambda p: p["updatedAt"], reverse=True))
        if request.method == "GET" and len(parts) == 2 and parts[0] == "user":
            owned = [self._summary(p, with_owner=False) for p in self.projects.values() if p["userId"] == parts[1]]
            return self._ok(sorted(owned, key=lambda p: p["updatedAt"], reverse=True))
        if len(parts) != 1:
            return self._error(404, "route not found")

        project = self.projects.get(parts[0])
        if project is None:
            return self._error(404, "Project not found")

        if request.method == "GET":
            user_id = request.url.params.get("userId")
            if not project["isPublic"] and project["userId"] != user_id:
                return self._error(403, "Access denied")
            return self._ok(project)
        if request.method == "PUT":
            if project["userId"] != body.get("userId"):
                return self._error(403, "Access denied")
            for key in ("name", "description", "isPublic", "tags", "projectData"):
                if key in body:
                    project[key] = body[key]
            project["updatedAt"] = self._now()
            return self._ok(project)
        if request.method == "DELETE":
            if project["userId"] != body.get("userId"):
                return self._error(403, "Access denied")
            del self.projects[parts[0]]
            return self._ok({})
        return self._error(405, "method not allowed")
