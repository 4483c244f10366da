"""Download functionality with progress reporting."""

import io
import logging

import httpx
from rich.progress import (
    Progress,
    BarColumn,
    DownloadColumn,
    TransferSpeedColumn,
    TimeRemainingColumn,
)

from selfupdate.core.errors import DownloadError
from selfupdate.core.github import GitHubClient

logger = logging.getLogger(__name__)


def download_asset(
    client: GitHubClient,
    owner: str,
    repo: str,
    asset_id: int,
    size: int = 0,
    description: str = "",
    show_progress: bool = True,
) -> bytes:
    """Download a release asset into memory.

    Args:
        client: API client used to reach the asset endpoint
        owner: Repository owner
        repo: Repository name
        asset_id: Identifier of the asset in the release
        size: Expected size in bytes, used for the progress bar and checked
            against what was received
        description: Label of the progress bar
        show_progress: Whether to show progress bar

    Returns:
        The asset content
    """
    buf = io.BytesIO()
    logger.info("Downloading asset %s of %s/%s", asset_id, owner, repo)

    with client.open_asset(owner, repo, asset_id) as response:
        total = size or int(response.headers.get("content-length", 0))

        try:
            if show_progress and total > 0:
                with Progress(
                    "[progress.description]{task.description}",
                    BarColumn(),
                    DownloadColumn(),
                    TransferSpeedColumn(),
                    TimeRemainingColumn(),
                ) as progress:
                    task = progress.add_task(
                        f"Downloading {description or asset_id}", total=total
                    )
                    for chunk in response.iter_bytes(chunk_size=8192):
                        buf.write(chunk)
                        progress.update(task, advance=len(chunk))
            else:
                for chunk in response.iter_bytes(chunk_size=8192):
                    buf.write(chunk)
        except httpx.HTTPError as e:
            raise DownloadError(f"Download of asset {asset_id} interrupted: {e}") from e

    data = buf.getvalue()
    if size and len(data) != size:
        raise DownloadError(
            f"Asset {asset_id} is {len(data)} bytes, expected {size} bytes"
        )
    return data
