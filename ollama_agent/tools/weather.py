"""
Weather Tool
============

Current-weather lookup for a location.

The lookup is mocked and always reports the same conditions, but the tool is
registered as impure: a real implementation would call a weather API, so
callers must not assume two calls with the same location return the same text.
"""

from ollama_agent.tools import ToolDefinition, tool_registry
from ollama_agent.utils.logger import Logger

logger = Logger("Weather")

MOCK_CONDITIONS = "22°C and partly cloudy"


async def _current_weather(params: dict) -> str:
    location = params.get("location")
    if not isinstance(location, str) or not location.strip():
        return "Error: Missing required argument: location"

    location = location.strip()
    logger.debug(f"Looking up weather for {location}")
    return f"The weather in {location} is currently {MOCK_CONDITIONS}."


weather_tool = ToolDefinition(
    name="weather",
    description="Get current weather information for a location",
    parameters={
        "type": "object",
        "properties": {
            "location": {
                "type": "string",
                "description": 'The city and state/country, e.g., "San Francisco, CA" or "Paris, France"'
            }
        },
        "required": ["location"]
    },
    execute=_current_weather
)


def register_weather_tool():
    """Register the weather lookup with the process-wide registry."""
    tool_registry.register(weather_tool)


# Auto-register on import
register_weather_tool()
