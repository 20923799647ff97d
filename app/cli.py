"""
app/cli.py

Command-line chat interface over the same pipeline as the HTTP API.
- Reads user input
- Runs classify -> gate -> respond against a local session store
- Prints the assistant's reply

Commands:
- /lang <code>: switch reply language (unknown codes fall back to English)
- exit | quit: leave
"""

import argparse
import logging
import os

from dotenv import load_dotenv

from assistant.languages import language_name, normalize_language
from assistant.pipeline import handle_turn
from assistant.results import PipelineError
from assistant.session import SessionStore
from llm.client import call_llm


logger = logging.getLogger(__name__)


def _parse_args(argv):
    parser = argparse.ArgumentParser(description="Multilingual tourist chatbot (terminal)")
    parser.add_argument("--language", default="en", help="reply language code, e.g. fr")
    parser.add_argument("--session", default="cli", help="session id")
    return parser.parse_args(argv)


def main(argv=None, input_fn=input, output_fn=print, llm=call_llm, store=None):
    """Run the interactive CLI loop."""
    load_dotenv()
    logging.basicConfig(
        level=os.getenv("LOG_LEVEL", "WARNING").upper(),
        format="[%(asctime)s] %(levelname)s - %(message)s",
    )
    args = _parse_args(argv)
    if store is None:
        store = SessionStore()
    language = normalize_language(args.language)
    output_fn(f"Tourist Assistant [{language_name(language)}] (type 'exit' to quit)\n")

    while True:
        try:
            raw = input_fn("You: ")
        except EOFError:
            output_fn("Bye!")
            break
        # Sanitize pasted scripts: remove repeated "You:" tokens and excess whitespace
        user = raw.replace("You:", "").replace("you:", "").strip()
        if not user:
            continue
        if user.lower() in {"exit", "quit"}:
            output_fn("Bye!")
            break
        if user.startswith("/lang"):
            language = normalize_language(user[len("/lang"):])
            output_fn(f"Language set to {language_name(language)}\n")
            continue

        try:
            reply = handle_turn(store, user, language=language, session_id=args.session, llm=llm)
        except PipelineError as exc:
            logger.error("Turn failed: %s", exc)
            reply = "Oops! Something went wrong."
        output_fn(f"Assistant: {reply}\n")


if __name__ == "__main__":
    main()
