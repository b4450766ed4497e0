"""Read arithmetic expressions from text files and archives."""
from pathlib import Path
import tarfile
import tempfile
import zipfile
from typing import List

import py7zr
from pydantic import BaseModel, ConfigDict, Field, FilePath

from rpn_calculator.common.operations import OperationRequest


class ExpressionLoader(BaseModel):
    """
    Load the expressions of a batch input, one per non-empty line.

    The input is either a plain text file or an archive containing at least
    one ``.txt`` file; only the first ``.txt`` file of an archive is read.
    """

    model_config = ConfigDict(frozen=True)

    input_file: FilePath = Field(..., description="Path to the input file or archive")

    def read_text(self) -> str:
        """
        Return the raw text content of the input.

        :return: Content of the text file, or of the first .txt file in the archive
        :rtype: str
        :raises ValueError: If the archive format is unsupported or contains no .txt file
        """
        if self.input_file.suffix.lower() == ".txt":
            # Plain text file: read directly
            return self.input_file.read_text(encoding="utf-8")
        # Archive file: read the first text file found
        return self._extract_archive(self.input_file)

    def load(self) -> List[OperationRequest]:
        """
        Read the input and return one request per non-empty line.

        Line numbers count non-empty lines only, starting at 1.

        :return: Expressions in input order
        :rtype: List[OperationRequest]
        """
        lines = [line.strip() for line in self.read_text().splitlines()]
        # Remove empty lines
        expressions = [line for line in lines if line]
        return [OperationRequest(line=number, expression=expr) for number, expr in enumerate(expressions, start=1)]

    @staticmethod
    def _is_txt(name: str) -> bool:
        return name.lower().endswith(".txt")

    @staticmethod
    def _extract_archive(archive_path: Path) -> str:
        """
        Read the first .txt file found in a supported archive and return its content as a string.

        Zip and tar members are read in memory, never written to disk.

        Supported formats:
        - .zip
        - .tar.xz
        - .7z

        :param Path archive_path: Path to the archive file

        :return: Content of the first .txt file
        :rtype: str
        :raises ValueError: If no .txt file is found or format is unsupported
        """
        suffixes = [suffix.lower() for suffix in archive_path.suffixes]

        if suffixes[-1:] == [".zip"]:
            with zipfile.ZipFile(archive_path, "r") as zf:
                txt_files = [f for f in zf.namelist() if ExpressionLoader._is_txt(f)]
                if not txt_files:
                    raise ValueError("📄❌ No .txt file found in zip archive")
                return zf.read(txt_files[0]).decode("utf-8")

        elif suffixes[-2:] == [".tar", ".xz"]:
            with tarfile.open(archive_path, "r:xz") as tf:
                txt_members = [m for m in tf.getmembers() if m.isfile() and ExpressionLoader._is_txt(m.name)]
                if not txt_members:
                    raise ValueError("📄❌ No .txt file found in tar.xz archive")
                return tf.extractfile(txt_members[0]).read().decode("utf-8")

        elif suffixes[-1:] == [".7z"]:
            # Create a temporary directory for safe extraction
            with tempfile.TemporaryDirectory() as tmpdir:
                tmpdir_path = Path(tmpdir).resolve()
                try:
                    with py7zr.SevenZipFile(archive_path, mode="r") as archive:
                        txt_files = [f for f in archive.getnames() if ExpressionLoader._is_txt(f)]
                        if not txt_files:
                            raise ValueError("📄❌ No .txt file found in 7z archive")
                        archive.extract(targets=[txt_files[0]], path=tmpdir_path)
                except py7zr.Bad7zFile as exc:
                    raise ValueError(f"📄❌ Invalid 7z archive: {exc}") from exc

                extracted = (tmpdir_path / txt_files[0]).resolve()
                if not extracted.is_relative_to(tmpdir_path) or not extracted.is_file():
                    raise ValueError(f"📄❌ Could not extract {txt_files[0]!r} from 7z archive")
                return extracted.read_text(encoding="utf-8")

        else:
            raise ValueError(f"📄❌ Unsupported archive format: {archive_path.suffix}")
