"""Async functional ACI image operations."""

import asyncio
import logging
from pathlib import Path
from typing import Union

import aiofiles

from .core.image import Image
from .models import ValidationOutcome

logger = logging.getLogger(__name__)

ACI_SUFFIX = ".aci"


def is_app_container_image(image_path: Union[str, Path]) -> bool:
    """Check if a path names an App Container Image file."""
    return str(image_path).endswith(ACI_SUFFIX)


async def file_list(image_path: Union[str, Path]) -> list[str]:
    """ACI 이미지의 rootfs 파일 목록을 조회합니다.

    Args:
        image_path: ACI 파일 경로 (예: "nginx.aci", "./images/app.aci")

    Returns:
        list[str]: rootfs 기준 상대 경로 목록, 아카이브 순서 그대로
            (예: ["/bin", "/bin/app"])

    Raises:
        ArchiveOpenError: 아카이브를 열 수 없는 경우
        ArchiveReadError: 아카이브가 손상된 경우

    Examples:
        files = await file_list("app.aci")
        print(f"rootfs 파일 {len(files)}개")
    """
    image = Image(image_path)
    return await asyncio.get_event_loop().run_in_executor(None, image.file_list)


async def validate_structure(image_path: Union[str, Path]) -> ValidationOutcome:
    """ACI 이미지의 구조(manifest + rootfs/)를 검증합니다.

    첫 번째 위반 사항에서 즉시 중단하며, 아카이브를 열 수 없는 경우에도
    예외 대신 실패 결과를 반환합니다.

    Args:
        image_path: ACI 파일 경로

    Returns:
        ValidationOutcome: 유효하면 참, 아니면 reason에 위반 사유

    Examples:
        outcome = await validate_structure("app.aci")
        if not outcome:
            print(f"유효하지 않은 이미지: {outcome.reason}")
    """
    image = Image(image_path)
    return await asyncio.get_event_loop().run_in_executor(
        None, image.validate_structure
    )


async def get_manifest(image_path: Union[str, Path]) -> bytes:
    """ACI 이미지의 manifest를 원본 바이트로 읽습니다.

    Args:
        image_path: ACI 파일 경로

    Returns:
        bytes: manifest 내용 (JSON 해석은 하지 않음)

    Raises:
        ArchiveOpenError: 아카이브를 열 수 없는 경우
        ManifestError: manifest가 없거나 일반 파일이 아닌 경우

    Examples:
        manifest = json.loads(await get_manifest("app.aci"))
        print(manifest["name"])
    """
    image = Image(image_path)
    return await asyncio.get_event_loop().run_in_executor(None, image.manifest)


async def extract_rootfs(
    image_path: Union[str, Path], destination: Union[str, Path]
) -> None:
    """ACI 이미지의 rootfs를 지정한 디렉토리에 풀어냅니다.

    rootfs/ 접두사는 제거되며 (rootfs/bin/app -> destination/bin/app),
    manifest는 기록하지 않습니다. 권한, 시간, ACL, 플래그를 복원합니다.

    Args:
        image_path: ACI 파일 경로
        destination: 대상 디렉토리 (없으면 생성)

    Raises:
        ArchiveOpenError: 아카이브를 열 수 없는 경우
        ExtractionError: 엔트리 기록 실패 또는 rootfs 밖의 경로인 경우

    Note:
        실패 이전에 기록된 파일은 삭제되지 않습니다.

    Examples:
        await extract_rootfs("app.aci", "/var/lib/containers/app")
    """
    image = Image(image_path)
    await asyncio.get_event_loop().run_in_executor(
        None, image.extract_rootfs_to, destination
    )


async def save_manifest(
    image_path: Union[str, Path], target_path: Union[str, Path]
) -> int:
    """ACI 이미지의 manifest를 파일로 저장합니다.

    Args:
        image_path: ACI 파일 경로
        target_path: 저장할 파일 경로

    Returns:
        int: 기록한 바이트 수

    Raises:
        ArchiveOpenError: 아카이브를 열 수 없는 경우
        ManifestError: manifest가 없거나 일반 파일이 아닌 경우

    Examples:
        await save_manifest("app.aci", "./app.manifest.json")
    """
    data = await get_manifest(image_path)
    async with aiofiles.open(target_path, "wb") as f:
        await f.write(data)
    logger.debug("Saved manifest of %s to %s", image_path, target_path)
    return len(data)
