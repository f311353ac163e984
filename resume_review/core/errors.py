"""
Extraction errors raised by the text extractor.

Only document-level failures are exceptions. Anything that goes wrong while
pulling a single field out of the text is reported on the field itself
(empty value, confidence 0, warning) instead.
"""


class ExtractionError(Exception):
    """Base class for document-level extraction failures."""

    user_message = "Could not read the uploaded document."

    def __init__(self, detail: str = ""):
        super().__init__(detail or self.user_message)
        self.detail = detail or self.user_message


class UnsupportedFormat(ExtractionError):
    user_message = "Unsupported file type. Please upload a PDF, Word, or plain text file."


class EmptyExtraction(ExtractionError):
    user_message = (
        "Could not extract sufficient text from the file. "
        "Please upload a resume with readable text or enter your details manually."
    )


class DecodingFailure(ExtractionError):
    # Same user-facing message as EmptyExtraction; logged separately.
    user_message = EmptyExtraction.user_message


class DocumentTooLarge(ExtractionError):
    user_message = "File size exceeds the upload limit."
