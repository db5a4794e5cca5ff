"""Application constants."""

STAGES = (
    "ingest",
    "aggregate",
    "route",
    "zonal",
)
EXIT_SUCCESS = 0
EXIT_PARTIAL = 10
EXIT_HARD_FAIL = 20

KEY_COLUMNS = ("departamento", "municipio", "barrio", "fecha")
COUNT_COLUMN = "n"
REQUIRED_FIELD = "municipio"

CITY_MARKER = "BOGO"
ZONAL_SEPARATOR = " E-"
MALFORMED_MARKER = "-"
WEEK_NUMBERING = ("ordinal", "iso")
COLUMN_TYPES = ("text", "numeric", "date", "guess")
FILE_ERROR_POLICIES = ("skip", "abort")

JSON_LOG_FIELDS = (
    "timestamp",
    "run_id",
    "stage",
    "source",
    "event",
    "status",
    "rows_before",
    "rows_after",
    "rows_dropped",
    "pct_dropped",
    "error_code",
    "message",
)
