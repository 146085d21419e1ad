#!/usr/bin/env python3
"""
Example of using ctx-stash with AWS S3 storage.

Requirements:
    pip install "ctx-stash[s3]"

    Configure AWS credentials via one of:
    - Environment variables (AWS_ACCESS_KEY_ID, AWS_SECRET_ACCESS_KEY)
    - ~/.aws/credentials file
    - IAM role (if running on EC2/Lambda)
"""

import asyncio

from ctxstash import CompactOptions, KnownKeyRegistry, compact_messages, parse_reference
from ctxstash.adapters import S3StorageAdapter, S3StorageOptions
from ctxstash.tools import GrepAndSearchFileOptions, grep_and_search_file


def sample_messages():
    return [
        {"role": "system", "content": "You are a data analyst assistant."},
        {"role": "user", "content": "Analyze our Q3 sales data"},
        {
            "role": "tool",
            "content": [
                {
                    "type": "tool-result",
                    "toolCallId": "call-sales",
                    "toolName": "get_sales_data",
                    "output": {
                        "type": "json",
                        "value": {
                            "quarter": "Q3-2025",
                            "transactions": [
                                {"id": f"TXN-{i:06d}", "amount": 100 + i, "region": "EU" if i % 3 else "US"}
                                for i in range(2000)
                            ],
                        },
                    },
                }
            ],
        },
        {"role": "assistant", "content": "I have the Q3 sales data."},
    ]


async def example_with_s3_adapter():
    """S3 adapter with explicit configuration; keys land under sessions/<session>/tool-results/."""
    known_keys = KnownKeyRegistry()
    adapter = S3StorageAdapter(
        S3StorageOptions(
            bucket="my-ctx-storage",
            prefix="sessions",
            session_id="q3-review",
            region="us-west-2",
        )
    )

    compacted = await compact_messages(
        sample_messages(), CompactOptions(storage=adapter, known_keys=known_keys)
    )

    reference = compacted[2]["content"][0]["output"]["value"]
    print(reference)

    result = grep_and_search_file(
        parse_reference(reference).key,
        r'"region": "US"',
        options=GrepAndSearchFileOptions(storage=adapter, known_keys=known_keys),
    )
    print(f"US transactions found: {len(result.get('matches', []))}")


async def example_with_s3_uri():
    """S3 storage resolved from a URI; the session id comes from CompactOptions."""
    compacted = await compact_messages(
        sample_messages(),
        CompactOptions(storage="s3://my-ctx-storage/conversations", session_id="uri-demo"),
    )
    print(compacted[2]["content"][0]["output"]["value"])


if __name__ == "__main__":
    asyncio.run(example_with_s3_adapter())
    asyncio.run(example_with_s3_uri())
