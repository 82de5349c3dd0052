"""Demo weather lookup tool backed by a fixed table."""

from typing import Annotated, Dict

from pydantic import BaseModel, Field

from rbac_rule_agent.llm_core.logger import get_logger
from .serialization import to_json

logger = get_logger(__name__)


class CityWeather(BaseModel):
    temperature: int
    condition: str
    humidity: int


WEATHER_DATA: Dict[str, CityWeather] = {
    "new york": CityWeather(temperature=72, condition="Sunny", humidity=45),
    "london": CityWeather(temperature=58, condition="Cloudy", humidity=78),
    "tokyo": CityWeather(temperature=68, condition="Partly Cloudy", humidity=60),
    "paris": CityWeather(temperature=65, condition="Rainy", humidity=82),
    "sydney": CityWeather(temperature=77, condition="Clear", humidity=55),
    "mumbai": CityWeather(temperature=88, condition="Humid", humidity=85),
    "singapore": CityWeather(temperature=86, condition="Thunderstorms", humidity=90),
}


def get_weather(city: Annotated[str, Field(description="The name of the city to get weather for")]) -> str:
    """Get the current weather for a specified city. Returns temperature in Fahrenheit, weather condition, and humidity percentage."""
    weather = WEATHER_DATA.get(city.lower().strip())

    if weather is None:
        logger.info(f"No weather data for '{city}'.")
        return to_json(
            {
                "city": city,
                "error": "Weather data not available for this city",
                "available_cities": list(WEATHER_DATA),
            }
        )

    return to_json(
        {
            "city": city,
            "temperature": f"{weather.temperature}°F",
            "condition": weather.condition,
            "humidity": f"{weather.humidity}%",
        }
    )
