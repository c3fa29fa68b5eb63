from sayso.services.asr import ASRService

__all__ = ["ASRService"]
