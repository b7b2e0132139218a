from storage.models.patient import CamelModel, HistoryRecord, Patient

__all__ = [
    "CamelModel",
    "HistoryRecord",
    "Patient",
]
