"""Test doubles: scripted command runner and an in-process registry."""

import inspect
import json

from aiohttp import web

from registry_dashboard.core.types import CommandResult, OutputLine, StreamName


class FakeRunner:
    """Command runner that replays scripted results instead of running docker.

    script maps a docker subcommand ("pull", "tag", "push") to either a
    (returncode, stdout, stderr) tuple, a CommandResult-like dict with
    timed_out, or an exception to raise.
    """

    executable = "docker"

    def __init__(self, script: dict | None = None):
        self.script = script or {}
        self.calls: list[tuple[str, ...]] = []

    async def run(self, *args, line_callback=None) -> CommandResult:
        self.calls.append(args)
        outcome = self.script.get(args[0], (0, f"{args[0]} done\n", ""))
        if isinstance(outcome, Exception):
            raise outcome

        timed_out = False
        if isinstance(outcome, dict):
            timed_out = outcome.get("timed_out", False)
            outcome = (outcome["returncode"], outcome.get("stdout", ""), outcome.get("stderr", ""))
        returncode, stdout, stderr = outcome

        if line_callback:
            lines = [OutputLine(StreamName.STDOUT, text) for text in stdout.splitlines()]
            lines += [OutputLine(StreamName.STDERR, text) for text in stderr.splitlines()]
            for line in lines:
                pending = line_callback(line)
                if inspect.isawaitable(pending):
                    await pending

        return CommandResult(
            args=tuple(args),
            returncode=returncode,
            stdout=stdout,
            stderr=stderr,
            timed_out=timed_out,
        )


class FakeRegistry:
    """Minimal Docker Registry v2 served by aiohttp for client and proxy tests."""

    def __init__(self):
        self.url = ""
        self.manifests: dict[tuple[str, str], str] = {}
        self.tags: dict[str, list[str]] = {}
        self.delete_status = 202
        self.omit_digest = False
        self.deleted: list[tuple[str, str]] = []
        self.accept_headers: list[str] = []
        self.received_queries: list[dict] = []

    def add_image(self, repository: str, tag: str, digest: str) -> None:
        self.manifests[(repository, tag)] = digest
        self.tags.setdefault(repository, []).append(tag)

    async def version(self, request):
        return web.json_response(
            {}, headers={"Docker-Distribution-API-Version": "registry/2.0"}
        )

    async def catalog(self, request):
        return web.json_response({"repositories": sorted(self.tags)})

    async def tags_list(self, request):
        repository = request.match_info["repo"]
        self.received_queries.append(dict(request.query))
        if repository not in self.tags:
            return web.json_response(
                {"errors": [{"code": "NAME_UNKNOWN"}]}, status=404
            )
        return web.json_response({"name": repository, "tags": self.tags[repository]})

    async def get_manifest(self, request):
        repository = request.match_info["repo"]
        reference = request.match_info["reference"]
        self.accept_headers.append(request.headers.get("Accept", ""))
        digest = self.manifests.get((repository, reference))
        if digest is None:
            return web.json_response(
                {"errors": [{"code": "MANIFEST_UNKNOWN"}]}, status=404
            )
        headers = {} if self.omit_digest else {"Docker-Content-Digest": digest}
        return web.Response(
            text=json.dumps({"schemaVersion": 2}),
            content_type="application/vnd.docker.distribution.manifest.v2+json",
            headers=headers,
        )

    async def delete_manifest(self, request):
        repository = request.match_info["repo"]
        reference = request.match_info["reference"]
        self.deleted.append((repository, reference))
        return web.Response(status=self.delete_status)

    def make_app(self) -> web.Application:
        app = web.Application()
        app.router.add_get("/v2/", self.version)
        app.router.add_get("/v2/_catalog", self.catalog)
        app.router.add_get("/v2/{repo:.+}/tags/list", self.tags_list)
        app.router.add_get("/v2/{repo:.+}/manifests/{reference}", self.get_manifest)
        app.router.add_delete("/v2/{repo:.+}/manifests/{reference}", self.delete_manifest)
        return app


async def read_events(response, stop_types=("close",)) -> list[dict]:
    """Read SSE data frames until an event whose type (or status value) is in stop_types."""
    events = []
    async for raw in response.content:
        line = raw.decode("utf-8").strip()
        if not line.startswith("data: "):
            continue
        event = json.loads(line[len("data: ") :])
        events.append(event)
        if event["type"] in stop_types or event.get("value") in stop_types:
            break
    return events
