class SaysoError(Exception):
    """Base exception for the sayso agent."""


class LLMError(SaysoError):
    def __init__(self, provider: str, detail: str):
        self.provider = provider
        super().__init__(f"LLM error ({provider}): {detail}")


class PlanningError(SaysoError):
    """The planner failed or returned a structure that is not a task plan."""


class PlanValidationError(PlanningError):
    def __init__(self, problems: list[str]):
        self.problems = problems
        super().__init__(f"Invalid task plan: {'; '.join(problems)}")


class SkillNotFoundError(SaysoError):
    def __init__(self, skill_name: str):
        self.skill_name = skill_name
        super().__init__(f"Skill not found: {skill_name}")


class ActionValidationError(SaysoError):
    def __init__(self, skill_name: str, detail: str):
        self.skill_name = skill_name
        super().__init__(f"Skill '{skill_name}' returned an invalid action: {detail}")


class ActionExecutionError(SaysoError):
    """An action could not be carried out on the target platform."""


class InvalidActionParamsError(ActionExecutionError):
    def __init__(self, action_type: str, detail: str):
        self.action_type = action_type
        super().__init__(f"Invalid params for {action_type}: {detail}")


class ActionNotSupportedError(ActionExecutionError):
    def __init__(self, action_type: str):
        self.action_type = action_type
        super().__init__(f"Action type not supported: {action_type}")


class PlatformDisabledError(ActionExecutionError):
    def __init__(self, platform: str):
        self.platform = platform
        super().__init__(f"{platform} integration disabled")


class PlatformAPIError(ActionExecutionError):
    def __init__(self, platform: str, api: str, detail: str):
        self.platform = platform
        self.api = api
        super().__init__(f"{platform} {api}: {detail}")
