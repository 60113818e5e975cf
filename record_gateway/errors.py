class RecordError(Exception):
    status_code = 500


class MissingKeyError(RecordError):
    status_code = 400

    def __init__(self, key_field: str):
        super().__init__(f"Missing {key_field}")
        self.key_field = key_field


class UnsupportedActionError(RecordError):
    status_code = 400


class RecordNotFoundError(RecordError):
    status_code = 404

    def __init__(self, message: str = "Not found"):
        super().__init__(message)


class RecordExistsError(RecordError):
    status_code = 409

    def __init__(self, message: str = "Record already exists"):
        super().__init__(message)
