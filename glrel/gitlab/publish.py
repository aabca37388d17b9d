"""Release publishing: upload assets, then create the release.

Flow:
1. resolve options and the project path
2. keep URL assets as-is, glob the file assets
3. upload every file asset concurrently (generic package or project upload)
4. POST the release with one link per asset
"""

from __future__ import annotations

import json
import os
import stat
from collections.abc import Mapping
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path

from glrel.core.config import ResolvedConfig, resolve_config
from glrel.core.errors import RELEASE_NAME, PluginError, get_error
from glrel.core.model import NextRelease, PublishContext, PublishedRelease, ReleaseLink
from glrel.core.result import Err, Ok, Result
from glrel.core.structured import StrDict
from glrel.core.template import render_opt
from glrel.gitlab.api import (
    GitLabApi,
    create_release,
    generic_package_url,
    put_generic_package,
    upload_project_file,
)
from glrel.gitlab.assets import GENERIC_PACKAGE_TARGET, AssetSpec, glob_assets, parse_assets
from glrel.gitlab.http import HttpClient, RealHttpClient
from glrel.gitlab.package import resolve_package_target
from glrel.gitlab.repo_id import get_repo_id
from glrel.gitlab.urls import encode_component, is_url_scheme, url_join

MAX_UPLOAD_WORKERS = 8


def _url_link(asset: AssetSpec, variables: Mapping[str, object]) -> ReleaseLink:
    return ReleaseLink(
        label=render_opt(asset.label, variables),
        raw_url=render_opt(asset.url, variables),
        type=render_opt(asset.type, variables),
        filepath=render_opt(asset.filepath, variables),
    )


def upload_asset(
    asset: AssetSpec,
    *,
    api: GitLabApi,
    repo_id: str,
    release: NextRelease,
    context: PublishContext,
) -> Result[ReleaseLink | None, PluginError]:
    """Upload one file asset.

    Returns Ok(None) when the file is missing or not a regular file; those
    assets are reported and skipped rather than failing the release. In dry
    run mode the request is logged instead of sent.
    """
    console = context.console
    variables = context.variables()
    label = render_opt(asset.label, variables)
    link_type = render_opt(asset.type, variables)
    filepath = render_opt(asset.filepath, variables)
    target = render_opt(asset.target, variables)
    status = render_opt(asset.status, variables)

    path = asset.file_path
    file = Path(context.cwd, path).absolute()
    try:
        st = file.stat()
    except OSError:
        console.error(f"The asset {path} cannot be read, and will be ignored.")
        return Ok(None)
    if not stat.S_ISREG(st.st_mode):
        console.error(f"The asset {path} is not a file, and will be ignored.")
        return Ok(None)

    console.debug(f"file path: {path}")
    console.debug(f"file label: {label}")
    console.debug(f"file type: {link_type}")
    console.debug(f"file filepath: {filepath}")
    console.debug(f"file target: {target}")
    console.debug(f"file status: {status}")

    if target == GENERIC_PACKAGE_TARGET:
        coords = resolve_package_target(
            asset,
            version=release.version,
            label=label,
            variables=variables,
            console=console,
        )
        if isinstance(coords, Err):
            return coords
        pkg = coords.value
        url = generic_package_url(api, repo_id, pkg.name, pkg.version, pkg.file_name)

        link = ReleaseLink(
            label=label,
            alt=release.channel,
            url=url,
            type="package",
            filepath=filepath,
        )
        if context.dry_run:
            console.log(f"Dry run: would PUT {path} to {url}")
            return Ok(link)

        console.debug(f"PUT-ing the file {file} to the generic packages API")
        uploaded = put_generic_package(
            api,
            repo_id,
            name=pkg.name,
            version=pkg.version,
            file_name=pkg.file_name,
            file=file,
            status=status,
        )
        if isinstance(uploaded, Err):
            console.error(
                f"An error occurred while uploading {file} to the GitLab generics package API:\n"
                f"{uploaded.error}"
            )
            return Err(get_error("EUPLOADFAILED", path=path, reason=str(uploaded.error)))

        console.log(f"Uploaded file: {url} ({uploaded.value.file_url})")
        return Ok(link)

    if context.dry_run:
        # The upload URL is only known once GitLab stores the file.
        uploads_url = api.project_url(repo_id, "uploads")
        console.log(f"Dry run: would POST {path} to {uploads_url}")
        return Ok(
            ReleaseLink(
                label=label,
                alt=os.path.basename(path),
                type=link_type,
                filepath=filepath,
            )
        )

    console.debug(f"POST-ing the file {file} to the project uploads API")
    upload = upload_project_file(api, repo_id, file)
    if isinstance(upload, Err):
        console.error(
            f"An error occurred while uploading {file} to the GitLab project uploads API:\n"
            f"{upload.error}"
        )
        return Err(get_error("EUPLOADFAILED", path=path, reason=str(upload.error)))

    console.log(f"Uploaded file: {upload.value.url}")
    return Ok(
        ReleaseLink(
            label=label,
            alt=upload.value.alt,
            url=upload.value.url,
            type=link_type,
            filepath=filepath,
        )
    )


def upload_assets(
    assets: list[AssetSpec],
    *,
    api: GitLabApi,
    repo_id: str,
    release: NextRelease,
    context: PublishContext,
) -> Result[list[ReleaseLink], PluginError]:
    """Upload file assets concurrently, keeping the input order of links.

    Every upload runs to completion; the first failure (in input order) is
    returned.
    """
    if not assets:
        return Ok([])

    def _one(asset: AssetSpec) -> Result[ReleaseLink | None, PluginError]:
        return upload_asset(asset, api=api, repo_id=repo_id, release=release, context=context)

    workers = min(MAX_UPLOAD_WORKERS, len(assets))
    with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="glrel-upload") as pool:
        results = list(pool.map(_one, assets))

    links: list[ReleaseLink] = []
    for result in results:
        if isinstance(result, Err):
            return result
        if result.value is not None:
            links.append(result.value)
    return Ok(links)


def link_payload(link: ReleaseLink, *, gitlab_url: str, repo_id: str) -> StrDict:
    """Render one ``assets.links`` entry; unset fields are omitted."""
    if link.raw_url:
        url: str | None = link.raw_url
    elif link.url is None:
        url = None
    elif is_url_scheme(link.url):
        url = link.url
    else:
        url = url_join(gitlab_url, repo_id, link.url)

    entry: StrDict = {
        "name": link.label or link.alt,
        "url": url,
        "link_type": link.type,
        "filepath": link.filepath,
    }
    return {k: v for k, v in entry.items() if v is not None}


def build_release_payload(
    *,
    release: NextRelease,
    milestones: list[object] | None,
    links: list[ReleaseLink],
    gitlab_url: str,
    repo_id: str,
) -> StrDict:
    notes = release.notes
    payload: StrDict = {
        "tag_name": release.git_tag,
        "description": notes if notes and notes.strip() else release.git_tag,
    }
    if milestones is not None:
        payload["milestones"] = milestones
    payload["assets"] = {
        "links": [link_payload(link, gitlab_url=gitlab_url, repo_id=repo_id) for link in links]
    }
    return payload


def release_url(gitlab_url: str, repo_id: str, git_tag: str) -> str:
    return url_join(gitlab_url, repo_id, f"/-/releases/{encode_component(git_tag)}")


def _collect_links(
    cfg: ResolvedConfig,
    *,
    api: GitLabApi,
    repo_id: str,
    release: NextRelease,
    context: PublishContext,
) -> Result[list[ReleaseLink], PluginError]:
    if not cfg.assets:
        return Ok([])

    parsed = parse_assets(cfg.assets)
    if isinstance(parsed, Err):
        return parsed

    console = context.console
    variables = context.variables()

    # URL assets are never globbed.
    url_assets = [a for a in parsed.value if a.url]
    console.debug(f"url assets: {url_assets}")
    globbed = glob_assets(context.cwd, [a for a in parsed.value if not a.url], variables)
    console.debug(f"globbed assets: {globbed}")

    links: list[ReleaseLink] = []
    for asset in url_assets:
        link = _url_link(asset, variables)
        console.debug(f"use link from release setting: {link.raw_url}")
        links.append(link)

    uploaded = upload_assets(globbed, api=api, repo_id=repo_id, release=release, context=context)
    if isinstance(uploaded, Err):
        return uploaded
    links.extend(uploaded.value)
    return Ok(links)


def publish(
    options: Mapping[str, object],
    context: PublishContext,
    *,
    http: HttpClient | None = None,
) -> Result[PublishedRelease, PluginError]:
    """Upload the configured assets and create the GitLab release.

    Args:
        options: Plugin options (see ``glrel.core.config``)
        context: Pipeline context with the next release and the logger
        http: HTTP client; a urllib client honouring the proxy config by default

    Returns:
        Ok with the release name and URL, or Err with the first failure
    """
    console = context.console
    release = context.next_release
    if release is None or not release.git_tag:
        return Err(get_error("ENORELEASE"))

    cfg = resolve_config(options, context)
    repo_id = get_repo_id(context, cfg.gitlab_url, context.repository_url)
    if repo_id is None:
        return Err(
            get_error(
                "EINVALIDGITLABURL",
                gitlab_url=cfg.gitlab_url,
                repository_url=context.repository_url,
            )
        )

    api = GitLabApi(
        http=http if http is not None else RealHttpClient(proxy=cfg.proxy),
        api_url=cfg.gitlab_api_url,
        token=cfg.gitlab_token,
    )

    console.debug(f"repoId: {repo_id}")
    console.debug(f"release name: {release.git_tag}")
    console.debug(f"release ref: {release.git_head}")
    console.debug(f"milestones: {cfg.milestones}")

    links = _collect_links(cfg, api=api, repo_id=repo_id, release=release, context=context)
    if isinstance(links, Err):
        return links

    payload = build_release_payload(
        release=release,
        milestones=cfg.milestones,
        links=links.value,
        gitlab_url=cfg.gitlab_url,
        repo_id=repo_id,
    )
    console.debug(f"Create a release for git tag {release.git_tag} with commit {release.git_head}")
    if context.dry_run:
        console.log(f"Dry run: would POST the following JSON:\n{json.dumps(payload, indent=2)}")
        console.log(f"Dry run: skipped creating GitLab release {release.git_tag}")
        return Ok(
            PublishedRelease(
                name=RELEASE_NAME,
                url=release_url(cfg.gitlab_url, repo_id, release.git_tag),
            )
        )
    console.debug(f"POST-ing the following JSON:\n{json.dumps(payload, indent=2)}")

    created = create_release(api, repo_id, payload)
    if isinstance(created, Err):
        console.error(
            f"An error occurred while making a request to the GitLab release API:\n{created.error}"
        )
        return Err(get_error("ERELEASEFAILED", git_tag=release.git_tag, reason=str(created.error)))

    console.log(f"Published GitLab release: {release.git_tag}")
    return Ok(
        PublishedRelease(
            name=RELEASE_NAME,
            url=release_url(cfg.gitlab_url, repo_id, release.git_tag),
        )
    )
