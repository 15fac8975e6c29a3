"""
CSV row reader.

Decodes CSV text into validated Row models. Any defect in the input
(no data, missing columns, blank required fields, ragged rows) aborts the
whole parse with a ParseError.
"""

import csv
import io
from collections.abc import Sequence

from pydantic import ValidationError as PydanticValidationError

from catalog_ingest.core.errors import ParseError
from catalog_ingest.core.models import Row
from catalog_ingest.core.validators import BaseValidator, RequiredFieldValidator, ValidationError

FAMILY_COLUMN = "familyFederatedId"
OPTION_COLUMN = "optionFederatedId"
TITLE_COLUMN = "title"
DETAILS_COLUMN = "details"

REQUIRED_COLUMNS = (FAMILY_COLUMN, TITLE_COLUMN, DETAILS_COLUMN)


class CSVRowReader:
    """
    Reads product rows from CSV text with a header line.

    Expected columns: familyFederatedId, optionFederatedId (optional),
    title, details. Values are trimmed and blank lines skipped.
    """

    def __init__(
        self,
        delimiter: str = ",",
        validators: Sequence[BaseValidator] | None = None,
    ):
        """
        Initialize CSV reader.

        Args:
            delimiter: Field delimiter
            validators: Field validators applied to every row; defaults to
                a RequiredFieldValidator per required column
        """
        self.delimiter = delimiter
        self.validators = list(validators) if validators is not None else [
            RequiredFieldValidator(column) for column in REQUIRED_COLUMNS
        ]

    def parse(self, raw: str | bytes) -> list[Row]:
        """
        Parse CSV content into rows.

        Args:
            raw: CSV content including the header line; bytes are decoded
                as UTF-8 (a leading BOM is dropped)

        Returns:
            Rows in input order

        Raises:
            ParseError: If the content cannot be decoded into valid rows
        """
        try:
            if isinstance(raw, bytes):
                raw = _decode(raw)
            return self._parse(raw)
        except ParseError as e:
            raise ParseError(f"CSV parsing failed: {e.message}", details=e.details) from e
        except csv.Error as e:
            raise ParseError(f"CSV parsing failed: {e}") from e

    def _parse(self, raw: str) -> list[Row]:
        reader = csv.reader(io.StringIO(raw or ""), delimiter=self.delimiter, skipinitialspace=True)
        lines = [
            (reader.line_num, values)
            for values in reader
            if any(value.strip() for value in values)
        ]

        if len(lines) < 2:
            raise ParseError("CSV contains no data rows")

        _, header_values = lines[0]
        header = [name.strip() for name in header_values]
        missing = [column for column in REQUIRED_COLUMNS if column not in header]
        if missing:
            raise ParseError(
                f"CSV missing required columns: {', '.join(missing)}",
                details={"missing_columns": missing},
            )

        return [self._to_row(line_num, header, values) for line_num, values in lines[1:]]

    def _to_row(self, line_num: int, header: list[str], values: list[str]) -> Row:
        if len(values) != len(header):
            raise ParseError(
                f"Row {line_num}: expected {len(header)} columns, got {len(values)}",
                details={"row": line_num},
            )

        record = {name: value.strip() for name, value in zip(header, values)}

        for validator in self.validators:
            try:
                validator.validate(record.get(validator.field_name), record)
            except ValidationError as e:
                raise ParseError(
                    f"Row {line_num}: {e.field_name} is required"
                    if e.rule_name == "required_field"
                    else f"Row {line_num}: {e}",
                    details={"row": line_num, "field": e.field_name, "rule": e.rule_name},
                ) from e

        try:
            return Row(
                family_key=record[FAMILY_COLUMN],
                option_key=record.get(OPTION_COLUMN) or None,
                title=record[TITLE_COLUMN],
                details=record[DETAILS_COLUMN],
            )
        except PydanticValidationError as e:
            raise ParseError(f"Row {line_num}: {e}", details={"row": line_num}) from e


def _decode(raw: bytes) -> str:
    try:
        return raw.decode("utf-8-sig")
    except UnicodeDecodeError as e:
        raise ParseError(
            f"Input is not valid UTF-8 (byte {e.start})",
            details={"position": e.start},
        ) from e
