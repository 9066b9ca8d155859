"""
AWS Lambda function to trigger the daily ingestion via the admin API endpoint.

Deploy this to Lambda and schedule with EventBridge once per day.
"""

import json
import os
import urllib.error
import urllib.request
from typing import Any, Dict


def lambda_handler(event: Dict[str, Any], context: Any) -> Dict[str, Any]:
    """
    Trigger ingestion via POST /admin/ingest.

    Environment Variables:
        API_URL: The service base URL (e.g., https://xxx.awsapprunner.com)
        ADMIN_API_SECRET: Shared secret sent as the x-admin-secret header
        INGEST_TIMEOUT: Request timeout in seconds (default: 300)

    EventBridge Rule Example:
        Schedule: cron(5 0 * * ? *)  # 00:05 UTC daily
    """
    api_url = os.environ.get("API_URL")
    secret = os.environ.get("ADMIN_API_SECRET")
    if not api_url or not secret:
        return {"statusCode": 500, "body": json.dumps({"error": "API_URL and ADMIN_API_SECRET must be set"})}

    timeout = int(os.environ.get("INGEST_TIMEOUT", "300"))

    endpoint = f"{api_url.rstrip('/')}/admin/ingest"

    request = urllib.request.Request(
        endpoint,
        method="POST",
        headers={"Content-Type": "application/json", "User-Agent": "TokenSnapshotTrigger/1.0", "x-admin-secret": secret},
    )

    try:
        print(f"Triggering ingestion at: {endpoint}")

        with urllib.request.urlopen(request, timeout=timeout) as response:
            result = json.loads(response.read().decode("utf-8"))

            print(f"Ingestion completed: {json.dumps(result, indent=2)}")

            return {"statusCode": 200, "body": json.dumps({"success": True, "ingestion_result": result.get("data")})}

    except urllib.error.HTTPError as e:
        error_body = e.read().decode("utf-8") if e.fp else str(e)
        print(f"Ingestion request failed with HTTP {e.code}: {error_body}")

        return {"statusCode": e.code, "body": json.dumps({"success": False, "error": f"HTTP {e.code}: {error_body}"})}

    except urllib.error.URLError as e:
        print(f"Ingestion request failed: {str(e)}")

        return {"statusCode": 500, "body": json.dumps({"success": False, "error": f"Connection error: {str(e)}"})}


# For local testing
if __name__ == "__main__":
    import sys

    if len(sys.argv) > 1:
        os.environ["API_URL"] = sys.argv[1]

    result = lambda_handler({}, None)
    print(json.dumps(result, indent=2))
