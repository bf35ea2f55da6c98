"""Example usage of the async ACI image API."""

import asyncio
import json
import logging
import sys
import tempfile

from aci_image import (
    AciError,
    extract_rootfs,
    file_list,
    get_manifest,
    validate_structure,
)

# Set up logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


async def main(image_path: str) -> int:
    """Validate, inspect and extract one image."""
    outcome = await validate_structure(image_path)
    if not outcome:
        logger.error(f"Invalid image {image_path}: {outcome.reason}")
        return 1
    logger.info(f"✓ {image_path} has a valid ACI structure")

    try:
        manifest = json.loads(await get_manifest(image_path))
        logger.info(f"Image name: {manifest.get('name', 'unknown')}")

        files = await file_list(image_path)
        logger.info(f"Found {len(files)} rootfs entries")
        for path in files[:10]:  # Show first 10 entries
            logger.info(f"  {path}")

        with tempfile.TemporaryDirectory() as destination:
            await extract_rootfs(image_path, destination)
            logger.info(f"Extracted rootfs to {destination}")

    except AciError as e:
        logger.error(f"ACI error: {e}")
        return 1
    except json.JSONDecodeError as e:
        logger.error(f"Manifest is not JSON: {e}")
        return 1

    return 0


if __name__ == "__main__":
    if len(sys.argv) != 2:
        print("usage: inspect_image.py IMAGE.aci")
        sys.exit(2)
    sys.exit(asyncio.run(main(sys.argv[1])))
