"""
Calculator → application hand-off.

The last quote computed on the calculator widget is parked in a single
key-value slot (Streamlit session state in the app) so the loan-details step
can pre-populate itself. One record, overwritten on every save.
"""

import json
import logging
from typing import Dict, MutableMapping, Optional

logger = logging.getLogger(__name__)

STORAGE_KEY = "jbcapital_loan_calculator_data"


def save_loan_calculator_data(store: MutableMapping, data: Dict) -> None:
    try:
        store[STORAGE_KEY] = json.dumps(data)
    except (TypeError, ValueError) as e:
        logger.warning(f"Error saving loan calculator data: {e}")


def get_loan_calculator_data(store: MutableMapping) -> Optional[Dict]:
    raw = store.get(STORAGE_KEY)
    if not raw:
        return None
    try:
        data = json.loads(raw)
    except (TypeError, ValueError) as e:
        logger.warning(f"Error retrieving loan calculator data: {e}")
        return None
    return data if isinstance(data, dict) else None


def clear_loan_calculator_data(store: MutableMapping) -> None:
    store.pop(STORAGE_KEY, None)
