"""Unpack uploaded artifacts into a stageable directory."""

import shutil
import zipfile
from pathlib import Path

from bgdeploy.core.exceptions import ExtractionError
from bgdeploy.core.logging import get_logger

logger = get_logger(__name__)

FIX_YOUR_ZIP_MESSAGE = (
    "Please double check your zip compression method and that the correct files are zipped.\n"
    "You can try confirming that it's valid on your computer by opening or performing some "
    "other action on it. Once you've confirmed that it's valid, please try again."
)


class Extractor:
    """Extracts zip artifacts."""

    def unzip(
        self,
        source: str | Path,
        destination: str | Path,
        manifest: str | None = None,
    ) -> Path:
        """Unzip ``source`` into ``destination``.

        Args:
            source: Path to the zip artifact
            destination: Directory to extract into, created if missing
            manifest: Optional manifest contents written to manifest.yml,
                replacing any manifest shipped in the archive

        Returns:
            The destination directory

        Raises:
            ExtractionError: If the archive cannot be read or written out
        """
        source = Path(source)
        destination = Path(destination)
        logger.info("extracting application")
        logger.debug("parameters for extractor: source: %s, destination: %s", source, destination)

        try:
            destination.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise ExtractionError(f"cannot create directory: {e}")

        try:
            archive = zipfile.ZipFile(source)
        except (zipfile.BadZipFile, OSError) as e:
            raise ExtractionError(f"cannot open zip file: {source}: {e}\n{FIX_YOUR_ZIP_MESSAGE}")

        with archive:
            for member in archive.infolist():
                try:
                    self._extract_member(archive, member, destination)
                except (OSError, zipfile.BadZipFile) as e:
                    raise ExtractionError(
                        f"cannot extract file from archive: {member.filename}: {e}"
                    )

        if manifest:
            try:
                (destination / "manifest.yml").write_text(manifest)
            except OSError as e:
                raise ExtractionError(f"cannot write manifest file: {e}")

        logger.info("extract was successful")
        return destination

    def _extract_member(
        self,
        archive: zipfile.ZipFile,
        member: zipfile.ZipInfo,
        destination: Path,
    ) -> None:
        target = (destination / member.filename).resolve()
        if not target.is_relative_to(destination.resolve()):
            raise ExtractionError(f"archive entry escapes destination: {member.filename}")

        if member.is_dir():
            target.mkdir(parents=True, exist_ok=True)
            return

        target.parent.mkdir(parents=True, exist_ok=True)
        with archive.open(member) as contents, open(target, "wb") as out:
            shutil.copyfileobj(contents, out)

        # Unix permission bits live in the high word of external_attr
        mode = (member.external_attr >> 16) & 0o777
        if mode:
            target.chmod(mode)
