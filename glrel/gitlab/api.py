"""GitLab REST endpoints used by the plugin.

Every call authenticates with the ``PRIVATE-TOKEN`` header and returns the
decoded JSON payload, narrowed to what the caller needs.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path

from glrel.core.result import Err, Ok, Result
from glrel.core.structured import StrDict, as_str_dict, get_str, get_table
from glrel.gitlab.http import HttpClient, HttpError, HttpResponse, encode_multipart
from glrel.gitlab.urls import encode_component, url_join


@dataclass(frozen=True, slots=True)
class ProjectUpload:
    """Response of the project uploads endpoint."""

    url: str
    alt: str | None


@dataclass(frozen=True, slots=True)
class PackageFile:
    """Response of a generic package upload (``select=package_file``)."""

    file_url: str | None


@dataclass(frozen=True, slots=True)
class GitLabApi:
    http: HttpClient
    api_url: str
    token: str | None

    def headers(self, extra: dict[str, str] | None = None) -> dict[str, str]:
        headers = {"PRIVATE-TOKEN": self.token or ""}
        if extra:
            headers.update(extra)
        return headers

    def project_url(self, repo_id: str, *segments: str) -> str:
        return url_join(self.api_url, f"/projects/{encode_component(repo_id)}", *segments)


def _json_table(response: HttpResponse, url: str) -> Result[StrDict, HttpError]:
    try:
        obj: object = response.json()
    except ValueError as e:
        return Err(HttpError(url=url, status=0, message=f"JSON parse error: {e}"))
    data = as_str_dict(obj)
    if data is None:
        return Err(HttpError(url=url, status=0, message="Expected JSON object"))
    return Ok(data)


def get_project(api: GitLabApi, repo_id: str) -> Result[StrDict, HttpError]:
    url = api.project_url(repo_id)
    result = api.http.request("GET", url, headers=api.headers())
    if isinstance(result, Err):
        return result
    return _json_table(result.value, url)


def upload_project_file(
    api: GitLabApi, repo_id: str, file: Path
) -> Result[ProjectUpload, HttpError]:
    """POST a file to ``/projects/:id/uploads`` as multipart form data."""
    url = api.project_url(repo_id, "/uploads")
    try:
        content_type, body = encode_multipart("file", file)
    except OSError as e:
        return Err(HttpError(url=url, status=0, message=f"cannot read {file}: {e}"))

    result = api.http.request(
        "POST", url, headers=api.headers({"Content-Type": content_type}), body=body
    )
    if isinstance(result, Err):
        return result

    data = _json_table(result.value, url)
    if isinstance(data, Err):
        return data
    upload_url = get_str(data.value, "url")
    if upload_url is None:
        return Err(HttpError(url=url, status=0, message="missing `url` in upload response"))
    return Ok(ProjectUpload(url=upload_url, alt=get_str(data.value, "alt")))


def generic_package_url(
    api: GitLabApi, repo_id: str, name: str, version: str, file_name: str
) -> str:
    """Download URL of a generic package file."""
    return api.project_url(repo_id, f"/packages/generic/{name}/{version}/{file_name}")


def put_generic_package(
    api: GitLabApi,
    repo_id: str,
    *,
    name: str,
    version: str,
    file_name: str,
    file: Path,
    status: str | None = None,
) -> Result[PackageFile, HttpError]:
    """PUT a file to the generic packages registry.

    ``name``, ``version`` and ``file_name`` are inserted as-is; callers encode
    them when needed.
    """
    query = f"?status={status}&select=package_file" if status else "?select=package_file"
    url = generic_package_url(api, repo_id, name, version, file_name) + query
    try:
        body = file.read_bytes()
    except OSError as e:
        return Err(HttpError(url=url, status=0, message=f"cannot read {file}: {e}"))

    result = api.http.request("PUT", url, headers=api.headers(), body=body)
    if isinstance(result, Err):
        return result

    data = _json_table(result.value, url)
    if isinstance(data, Err):
        return data
    file_tbl = get_table(data.value, "file") or {}
    return Ok(PackageFile(file_url=get_str(file_tbl, "url")))


def create_release(api: GitLabApi, repo_id: str, payload: StrDict) -> Result[None, HttpError]:
    url = api.project_url(repo_id, "/releases")
    result = api.http.request(
        "POST",
        url,
        headers=api.headers({"Content-Type": "application/json"}),
        body=json.dumps(payload).encode("utf-8"),
    )
    if isinstance(result, Err):
        return result
    return Ok(None)
