from .settings import InvalidTriggerPolicy, MachineSettings

__all__ = ["InvalidTriggerPolicy", "MachineSettings"]
