import asyncio
import sys

from rbac_rule_agent.config import load_settings
from rbac_rule_agent.llm_core import AgentError, ConfigurationError, setup_logging
from rbac_rule_agent.rbac import create_claude_agent, get_weather


async def main() -> None:
    """
    Run the plain-chat and weather-tool examples, then chat with the weather agent.

    Every question is a separate agent run; nothing is remembered between them.
    """
    setup_logging()
    try:
        settings = load_settings().claude
    except ConfigurationError as e:
        print(f"Error: {e}")
        return

    print("=== Example 1: Simple chat without tools ===\n")
    async with create_claude_agent(settings) as simple_agent:
        result = await simple_agent.invoke("What is the capital of France?")
        print("Response:", result.final_text)

    async with create_claude_agent(settings, tools=[get_weather]) as weather_agent:
        print("\n=== Example 2: Agent with Weather Tool ===\n")
        result = await weather_agent.invoke("What's the weather like in Tokyo?")
        print("Response:", result.final_text)

        print("\n=== Example 3: Question that doesn't need tools ===\n")
        result = await weather_agent.invoke("Explain what Python closures are in simple terms.")
        print("Response:", result.final_text)

        if not sys.stdin.isatty():
            return

        print("\nAsk about the weather! Type 'exit' or 'quit' to stop.")
        while True:
            user_input = input("\nYou: ").strip()
            if user_input.lower() in ["exit", "quit"]:
                print("Goodbye!")
                break

            if not user_input:
                continue

            try:
                result = await weather_agent.invoke(user_input)
                print(f"Assistant: {result.final_text}")
            except AgentError as e:
                print(f"An error occurred: {e}")


if __name__ == "__main__":
    asyncio.run(main())
