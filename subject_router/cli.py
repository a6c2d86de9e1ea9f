"""
Interactive terminal loop over the conversation router.

Every line is one turn for the requestor `user`; `exit` quits.
"""
import asyncio
import logging
import os

from subject_router.services.container import build_services

REQUESTOR = "user"


async def run():
    services = build_services()
    print("Hi! Please enter your query.")
    print("Type 'exit' to close the application.\n")

    try:
        while True:
            try:
                user_input = await asyncio.to_thread(input)
            except (EOFError, KeyboardInterrupt):
                break

            if user_input.strip().lower() == "exit":
                break
            if not user_input.strip():
                continue

            response = await services.router.converse(user_input, REQUESTOR)
            print("\nResponse: " + response + "\n")
    finally:
        await services.aclose()

    print("Goodbye!")


def main():
    logging.basicConfig(level=os.getenv("LOG_LEVEL", "WARNING"))
    asyncio.run(run())


if __name__ == "__main__":
    main()
