from storage.repositories.patient_repository import PatientRepository
from storage.repositories.line_bot_repository import LineBotRepository

__all__ = ["PatientRepository", "LineBotRepository"]
