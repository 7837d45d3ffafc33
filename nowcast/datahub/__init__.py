from .client import BulkResult, EstimatesClient
from .flatten import flatten_response, iter_records, records_to_frame
from .io import read_dataset, write_records
from .pipeline import EstimatesRequest, prepare_estimates
from .records import IndicatorRecord
from .responses import NationalResponse, SubnationalResponse, parse_response

__all__ = [
    "BulkResult",
    "EstimatesClient",
    "EstimatesRequest",
    "IndicatorRecord",
    "NationalResponse",
    "SubnationalResponse",
    "flatten_response",
    "iter_records",
    "parse_response",
    "prepare_estimates",
    "read_dataset",
    "records_to_frame",
    "write_records",
]
