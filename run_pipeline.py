#!/usr/bin/env python3
"""CLI for the Nomad RAG pipeline: ingest documents, query context, chat."""

import argparse
import json
import logging
import sys

from core.config import settings


def setup_logging(verbose: bool = False) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level, format="%(asctime)s [%(levelname)s] %(name)s: %(message)s"
    )


def parse_metadata(pairs: list[str]) -> dict[str, str]:
    metadata = {}
    for pair in pairs:
        key, sep, value = pair.partition("=")
        if not sep or not key:
            raise SystemExit(f"Invalid metadata '{pair}', expected key=value")
        metadata[key] = value
    return metadata


def cmd_ingest(args: argparse.Namespace) -> None:
    """Ingest a document into the vector store."""
    from core.resources import get_resources
    from ingestion.pipeline import Ingestor

    resources = get_resources()
    ingestor = Ingestor(resources.embedder, resources.store, chunk_size=args.chunk_size)

    print(f"Ingesting: {args.file} (chunk size={ingestor.chunk_size})")
    result = ingestor.ingest_file(
        args.file, document_id=args.id, metadata=parse_metadata(args.meta)
    )

    print(f"  Stored {result.chunks_stored} chunks as {result.document_id}")
    print(f"\nDone! Total chunks in store: {resources.store.count()}")


def cmd_context(args: argparse.Namespace) -> None:
    """Show the knowledge-base context a query would receive."""
    from core.resources import get_resources
    from retrieval.retriever import Retriever

    resources = get_resources()
    retriever = Retriever(resources.embedder, resources.store)
    result = retriever.retrieve(args.query, top_k=args.top_k)

    status = "accepted" if result.accepted else "rejected"
    print(f"Context {status}: confidence {result.confidence:.3f}, {result.match_count} matches")
    if result.failure_reason:
        print(f"Failure: {result.failure_reason}")

    for i, match in enumerate(result.matches, 1):
        preview = match.text[:100].replace("\n", " ")
        print(f"  {i}. [{match.score:.3f}] {preview}")

    if result.context_text:
        print(f"\n{result.context_text}")


def cmd_chat(args: argparse.Namespace) -> None:
    """Run one chat turn against a provider."""
    from core.resources import get_resources
    from generation.chat import ChatService, build_providers
    from ingestion.loader import load_attachment
    from retrieval.retriever import Retriever

    retriever = None
    if args.rag:
        resources = get_resources()
        retriever = Retriever(resources.embedder, resources.store)

    service = ChatService(build_providers(), retriever)
    response = service.chat_turn(
        args.provider,
        {
            "message": args.message,
            "system_prompt": args.system,
            "conversation_history": args.history,
            "use_rag": args.rag,
            "mode": args.mode,
            "attachments": [load_attachment(path) for path in args.attach],
        },
    )

    print(f"[{response.provider_id}] mode={response.mode.value} rag_used={response.rag_used}")
    if response.outcome.value != "ok":
        print(f"Outcome: {response.outcome.value} ({response.error_kind})")
    print(f"\n{response.response}")


def cmd_check_providers(args: argparse.Namespace) -> None:
    """Check that every provider's credentials work."""
    from generation.chat import build_providers
    from generation.health import check_providers

    print(json.dumps(check_providers(build_providers()), indent=2))


def cmd_clear(args: argparse.Namespace) -> None:
    """Clear all chunks from vector store."""
    from core.resources import get_resources

    count = get_resources().store.delete_all()
    print(f"Deleted {count} chunks from vector store")


def cmd_stats(args: argparse.Namespace) -> None:
    """Show vector store statistics."""
    from core.resources import get_resources

    total = get_resources().store.count()
    print(f"Total chunks in store: {total}")


def main() -> None:
    parser = argparse.ArgumentParser(description="Nomad RAG CLI")
    parser.add_argument("-v", "--verbose", action="store_true", help="Verbose logging")
    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    # ingest
    p_ingest = subparsers.add_parser("ingest", help="Ingest a document")
    p_ingest.add_argument("file", help="Path to document file (.txt, .pdf, .doc, .docx)")
    p_ingest.add_argument("--id", help="Document id (generated if omitted)")
    p_ingest.add_argument(
        "--meta", action="append", default=[], metavar="KEY=VALUE",
        help="Extra metadata stored with every chunk",
    )
    p_ingest.add_argument("--chunk-size", type=int, default=settings.chunk_size)

    # context
    p_context = subparsers.add_parser("context", help="Show retrieved context for a query")
    p_context.add_argument("query", help="Query text")
    p_context.add_argument("--top-k", type=int, default=settings.top_k)

    # chat
    p_chat = subparsers.add_parser("chat", help="Send one message to a provider")
    p_chat.add_argument("message", help="User message")
    p_chat.add_argument("--provider", choices=["claude", "grok", "gemini"], default="claude")
    p_chat.add_argument("--mode", choices=["precision", "exploratory"], default="precision")
    p_chat.add_argument("--system", help="Extra system instructions")
    p_chat.add_argument("--history", default=None, help="Conversation history as JSON")
    p_chat.add_argument("--no-rag", dest="rag", action="store_false", help="Skip retrieval")
    p_chat.add_argument("--attach", action="append", default=[], help="Attach a file")

    # check-providers
    subparsers.add_parser("check-providers", help="Verify provider API keys")

    # clear
    subparsers.add_parser("clear", help="Clear all chunks")

    # stats
    subparsers.add_parser("stats", help="Show store statistics")

    args = parser.parse_args()
    setup_logging(args.verbose)

    if not args.command:
        parser.print_help()
        sys.exit(1)

    commands = {
        "ingest": cmd_ingest,
        "context": cmd_context,
        "chat": cmd_chat,
        "check-providers": cmd_check_providers,
        "clear": cmd_clear,
        "stats": cmd_stats,
    }
    commands[args.command](args)


if __name__ == "__main__":
    main()
