from pathlib import Path


class UploadDirectory:
    """
    Validate and create the directory that holds staged uploads.

    - The directory comes from `GatewaySettings.upload_dir` (UPLOAD_DIR).
    - A RuntimeError is raised if the path exists but is not a directory,
      or if it cannot be created.
    """

    def __init__(self, path: Path | str) -> None:
        upload_dir = Path(path).expanduser()

        # If the path exists but is not a directory, that's a configuration error.
        if upload_dir.exists() and not upload_dir.is_dir():
            raise RuntimeError(
                f"UPLOAD_DIR={str(path)!r} points to a file, not a directory "
                f"({upload_dir}). Please set UPLOAD_DIR to a directory path."
            )

        self.path = upload_dir
        self._initialized = False

    def ensure(self) -> Path:
        """
        Create the directory on first call. Subsequent calls are no-ops.
        """
        if self._initialized:
            return self.path
        try:
            self.path.mkdir(parents=True, exist_ok=True)
        except Exception as exc:
            raise RuntimeError(f"Failed to create or access upload directory at {self.path}") from exc
        self._initialized = True
        return self.path
