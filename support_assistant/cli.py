"""Interactive HTTP client for the support assistant's chat endpoints."""

import argparse
import json
from typing import Callable, Optional

import httpx

from support_assistant.entities import HEADER_CORRELATION_ID
from support_assistant.structured_logging import configure_structlog, get_logger

logger = get_logger("CHAT_CLIENT")

EXIT_COMMANDS = {"exit", "quit"}


def open_conversation(client: httpx.Client, client_id: str) -> Optional[tuple[str, str]]:
    """Create a conversation and return ``(conversation_id, thread_id)``, or None on failure."""
    response = client.post("/api/conversations", json={"clienteId": client_id})
    if response.status_code != 200:
        print(f"Failed to start conversation: {response.status_code}")
        print(f"Response: {response.text}")
        return None

    data = response.json()
    print(f"\n{'=' * 60}")
    print("New conversation started!")
    print(f"Conversation ID: {data['conversationId']}")
    print(f"Thread ID: {data['threadId']}")
    print(f"Correlation ID: {response.headers.get(HEADER_CORRELATION_ID, '')}")
    print(f"{'=' * 60}\n")
    return data["conversationId"], data["threadId"]


def start_conversation(
    base_url: str,
    client_id: str,
    conversation_id: Optional[str] = None,
    thread_id: Optional[str] = None,
    client: Optional[httpx.Client] = None,
    input_fn: Callable[[str], str] = input,
) -> None:
    """Run an interactive chat session with the assistant via HTTP."""
    client = client or httpx.Client(base_url=base_url, timeout=60.0)

    try:
        if not conversation_id or not thread_id:
            opened = open_conversation(client, client_id)
            if opened is None:
                return
            conversation_id, thread_id = opened

        print("Type 'exit' or 'quit' to end the conversation.\n")

        while True:
            user_input = input_fn("You: ")
            if user_input.strip().lower() in EXIT_COMMANDS:
                logger.info("Ending conversation")
                break
            if not user_input.strip():
                continue

            payload = {"message": user_input, "conversationId": conversation_id, "threadId": thread_id}
            try:
                logger.info("Sending message", thread_id=thread_id, conversation_id=conversation_id)
                response = client.post("/api/chat", json=payload)
                data = response.json()

                if response.status_code == 200:
                    print(f"\nAssistant: {data['response']}\n")
                    logger.info("Received response", msg_id=data.get("MsgId"))
                else:
                    print(f"\nError: {response.status_code} {data.get('error', '')}")
                    if data.get("retryable"):
                        print("The assistant took too long to answer. Try again.")
                    print()
                    logger.error("HTTP error", status_code=response.status_code, response=response.text)

            except httpx.TimeoutException:
                print("\nError: Request timed out. Try again.\n")
                logger.error("Request timeout")
            except httpx.RequestError as e:
                print(f"\nError: Failed to send request: {e}\n")
                logger.error("Request error", error=str(e))
            except json.JSONDecodeError as e:
                print(f"\nError: Failed to parse response: {e}\n")
                logger.error("JSON decode error", error=str(e))

    except KeyboardInterrupt:
        print("\n\nConversation interrupted.")
    finally:
        client.close()


def main(argv: Optional[list[str]] = None) -> None:
    """Main entry point for the chat client."""
    parser = argparse.ArgumentParser(description="HTTP client for chatting with the support assistant")
    parser.add_argument(
        "--base-url",
        type=str,
        default="http://localhost:8000",
        help="Base HTTP URL (default: http://localhost:8000)",
    )
    parser.add_argument("--client-id", type=str, required=True, help="Location ID of the client to chat as")
    parser.add_argument("--conversation-id", type=str, default=None, help="Existing conversation record ID (optional)")
    parser.add_argument("--thread-id", type=str, default=None, help="Thread ID of the existing conversation (optional)")

    args = parser.parse_args(argv)

    configure_structlog()
    start_conversation(args.base_url, args.client_id, args.conversation_id, args.thread_id)


if __name__ == "__main__":
    main()
