"""Error types raised by the conversion pipeline. Each carries the HTTP status it maps to."""


class ConverterError(Exception):
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class EmptyBatch(ConverterError):
    status_code = 400


class UnsupportedFormat(ConverterError):
    status_code = 400


class InvalidPath(ConverterError):
    status_code = 400


class TooManyFiles(ConverterError):
    status_code = 400


class FileTooLarge(ConverterError):
    status_code = 413


class DirectoryCreateError(ConverterError):
    pass


class CodecError(ConverterError):
    """Decode or encode failure, including corrupt input bytes."""


class WriteError(ConverterError):
    pass


class FileManagerActionFailed(ConverterError):
    pass
