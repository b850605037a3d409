class BaseKeysetPagerException(Exception):
    pass


class CursorError(BaseKeysetPagerException, ValueError):
    """ Invalid cursor provided by the caller

    Reported when the `after`/`before` values cannot be used to paginate the query
    """

    def __init__(self, err: str):
        super().__init__(f'Cursor error: {err}')


class InvalidColumnError(BaseKeysetPagerException):
    """ Query mentioned an invalid column name

    Reported when a column mentioned by name is not found on any table of the query
    """

    def __init__(self, table: str, column_name: str, where: str):
        self.table = table
        self.column_name = column_name
        self.where = where

        super().__init__(f'Invalid column "{column_name}" for "{table}" specified in {where}')
