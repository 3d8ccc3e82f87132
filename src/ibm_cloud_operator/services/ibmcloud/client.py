"""IBM Cloud REST client built on requests."""

from __future__ import annotations

import json
import logging
import os
import time
from dataclasses import dataclass, field
from typing import Any, Optional
from urllib.parse import quote

import requests

from ... import metrics
from ...utils.rate_limit import handle_rate_limit_error, rate_limit_ibmcloud
from .errors import IBMCloudAPIError

logger = logging.getLogger(__name__)

DEFAULT_ENDPOINTS = {
    "vpc": "https://{region}.iaas.cloud.ibm.com/v1",
    "resource_controller": "https://resource-controller.cloud.ibm.com",
    "resource_manager": "https://resource-controller.cloud.ibm.com",
    "global_catalog": "https://globalcatalog.cloud.ibm.com/api/v1",
    "global_tagging": "https://tags.global-search-tagging.cloud.ibm.com",
}

MERGE_PATCH = "application/merge-patch+json"


@dataclass
class ClientOptions:
    """Runtime options for :class:`IBMCloudClient`.

    Attributes:
        region: VPC region, e.g. ``us-south``
        timeout_sec: Per-request timeout (seconds)
        vpc_api_version: Date passed as the VPC API ``version`` query parameter
        endpoints: Per-service base URL overrides, keyed like ``DEFAULT_ENDPOINTS``
    """

    region: str = "us-south"
    timeout_sec: float = float(os.getenv("IBMCLOUD_REQUEST_TIMEOUT_SECONDS", "60"))
    vpc_api_version: str = os.getenv("IBMCLOUD_VPC_API_VERSION", "2021-06-22")
    endpoints: dict[str, str] = field(default_factory=dict)


class IBMCloudClient:
    """IBM Cloud client covering VPC, resource controller, catalog, tagging and Event Streams.

    Args:
        bearer_token: IAM access token (without the ``Bearer`` prefix)
        options: Optional :class:`ClientOptions`
    """

    def __init__(self, bearer_token: str, options: Optional[ClientOptions] = None) -> None:
        self.options = options or ClientOptions()
        self.session = requests.Session()
        self.session.headers.update({
            "Authorization": f"Bearer {bearer_token}",
            "Accept": "application/json",
        })

    # ---------------- low-level ----------------
    def _endpoint(self, service: str) -> str:
        base = self.options.endpoints.get(service) or DEFAULT_ENDPOINTS[service]
        return base.format(region=self.options.region).rstrip("/")

    @rate_limit_ibmcloud
    def _send(
        self,
        method: str,
        url: str,
        params: Optional[dict[str, Any]],
        json_body: Optional[Any],
        content_type: str,
    ) -> requests.Response:
        headers = {"Content-Type": content_type} if json_body is not None else {}
        return self.session.request(
            method=method,
            url=url,
            params=params,
            data=json.dumps(json_body) if json_body is not None else None,
            headers=headers,
            timeout=self.options.timeout_sec,
        )

    def _request(
        self,
        operation: str,
        method: str,
        url: str,
        *,
        params: Optional[dict[str, Any]] = None,
        json_body: Optional[Any] = None,
        content_type: str = "application/json",
    ) -> dict[str, Any]:
        """Perform an HTTP request and return the JSON response (or empty dict).

        Raises:
            IBMCloudAPIError: On non-2xx responses
            requests.RequestException: On connection-level errors
        """
        attempt = 0
        while True:
            start_time = time.time()
            try:
                resp = self._send(method, url, params, json_body, content_type)
                if resp.status_code >= 400:
                    raise _api_error(resp)
                metrics.api_call_total.labels(api_type="ibmcloud", operation=operation, result="success").inc()
                if not resp.content:
                    return {}
                try:
                    return resp.json()
                except ValueError:
                    logger.warning("Non-JSON response from %s %s", method, url)
                    return {}
            except IBMCloudAPIError as e:
                metrics.api_call_total.labels(api_type="ibmcloud", operation=operation, result="error").inc()
                if handle_rate_limit_error(e, api_type="ibmcloud", attempt=attempt):
                    attempt += 1
                    continue
                raise
            except requests.RequestException:
                metrics.api_call_total.labels(api_type="ibmcloud", operation=operation, result="error").inc()
                raise
            finally:
                duration = time.time() - start_time
                metrics.api_call_duration_seconds.labels(api_type="ibmcloud", operation=operation).observe(duration)

    def _vpc_params(self) -> dict[str, Any]:
        return {"version": self.options.vpc_api_version, "generation": 2}

    def _vpc_list(self, operation: str, collection: str) -> list[dict[str, Any]]:
        items: list[dict[str, Any]] = []
        url: Optional[str] = f"{self._endpoint('vpc')}/{collection}"
        params: Optional[dict[str, Any]] = self._vpc_params()
        while url:
            page = self._request(operation, "GET", url, params=params)
            items.extend(page.get(collection) or [])
            url = (page.get("next") or {}).get("href")
            # next.href already carries the query string
            params = None
        return items

    # ---------------- VPC ----------------
    def list_vpcs(self) -> list[dict[str, Any]]:
        return self._vpc_list("list_vpcs", "vpcs")

    def create_vpc(self, body: dict[str, Any]) -> dict[str, Any]:
        return self._request(
            "create_vpc", "POST", f"{self._endpoint('vpc')}/vpcs", params=self._vpc_params(), json_body=body
        )

    def update_vpc(self, vpc_id: str, patch: dict[str, Any]) -> dict[str, Any]:
        return self._request(
            "update_vpc",
            "PATCH",
            f"{self._endpoint('vpc')}/vpcs/{quote(vpc_id)}",
            params=self._vpc_params(),
            json_body=patch,
            content_type=MERGE_PATCH,
        )

    def delete_vpc(self, vpc_id: str) -> None:
        self._request("delete_vpc", "DELETE", f"{self._endpoint('vpc')}/vpcs/{quote(vpc_id)}", params=self._vpc_params())

    def list_subnets(self) -> list[dict[str, Any]]:
        return self._vpc_list("list_subnets", "subnets")

    def create_subnet(self, body: dict[str, Any]) -> dict[str, Any]:
        return self._request(
            "create_subnet", "POST", f"{self._endpoint('vpc')}/subnets", params=self._vpc_params(), json_body=body
        )

    def update_subnet(self, subnet_id: str, patch: dict[str, Any]) -> dict[str, Any]:
        return self._request(
            "update_subnet",
            "PATCH",
            f"{self._endpoint('vpc')}/subnets/{quote(subnet_id)}",
            params=self._vpc_params(),
            json_body=patch,
            content_type=MERGE_PATCH,
        )

    def delete_subnet(self, subnet_id: str) -> None:
        self._request(
            "delete_subnet", "DELETE", f"{self._endpoint('vpc')}/subnets/{quote(subnet_id)}", params=self._vpc_params()
        )

    # ---------------- resource controller ----------------
    def _rc(self, path: str) -> str:
        return f"{self._endpoint('resource_controller')}/v2/{path}"

    def get_resource_instance(self, instance_id: str) -> dict[str, Any]:
        return self._request("get_resource_instance", "GET", self._rc(f"resource_instances/{quote(instance_id, safe='')}"))

    def create_resource_instance(self, body: dict[str, Any]) -> dict[str, Any]:
        return self._request("create_resource_instance", "POST", self._rc("resource_instances"), json_body=body)

    def update_resource_instance(self, instance_id: str, body: dict[str, Any]) -> dict[str, Any]:
        return self._request(
            "update_resource_instance",
            "PATCH",
            self._rc(f"resource_instances/{quote(instance_id, safe='')}"),
            json_body=body,
        )

    def delete_resource_instance(self, instance_id: str) -> None:
        self._request(
            "delete_resource_instance", "DELETE", self._rc(f"resource_instances/{quote(instance_id, safe='')}")
        )

    def get_resource_key(self, key_id: str) -> dict[str, Any]:
        return self._request("get_resource_key", "GET", self._rc(f"resource_keys/{quote(key_id, safe='')}"))

    def create_resource_key(self, body: dict[str, Any]) -> dict[str, Any]:
        return self._request("create_resource_key", "POST", self._rc("resource_keys"), json_body=body)

    def update_resource_key(self, key_id: str, body: dict[str, Any]) -> dict[str, Any]:
        return self._request(
            "update_resource_key", "PATCH", self._rc(f"resource_keys/{quote(key_id, safe='')}"), json_body=body
        )

    def delete_resource_key(self, key_id: str) -> None:
        self._request("delete_resource_key", "DELETE", self._rc(f"resource_keys/{quote(key_id, safe='')}"))

    # ---------------- resource manager, catalog, tagging ----------------
    def list_resource_groups(self) -> list[dict[str, Any]]:
        page = self._request(
            "list_resource_groups", "GET", f"{self._endpoint('resource_manager')}/v2/resource_groups"
        )
        return page.get("resources") or []

    def search_catalog(self, query: str) -> list[dict[str, Any]]:
        page = self._request(
            "search_catalog", "GET", self._endpoint("global_catalog"), params={"q": query, "include": "*"}
        )
        return page.get("resources") or []

    def get_catalog_children(self, entry_id: str) -> list[dict[str, Any]]:
        page = self._request(
            "get_catalog_children",
            "GET",
            f"{self._endpoint('global_catalog')}/{quote(entry_id)}/*",
            params={"include": "*"},
        )
        return page.get("resources") or []

    def list_tags(self, crn: str) -> list[str]:
        page = self._request(
            "list_tags",
            "GET",
            f"{self._endpoint('global_tagging')}/v3/tags",
            params={"attached_to": crn, "tag_type": "user"},
        )
        return [item["name"] for item in page.get("items") or [] if item.get("name")]

    def attach_tags(self, crn: str, tag_names: list[str]) -> None:
        self._request(
            "attach_tags",
            "POST",
            f"{self._endpoint('global_tagging')}/v3/tags/attach",
            json_body={"resources": [{"resource_id": crn}], "tag_names": tag_names},
        )

    def detach_tags(self, crn: str, tag_names: list[str]) -> None:
        self._request(
            "detach_tags",
            "POST",
            f"{self._endpoint('global_tagging')}/v3/tags/detach",
            json_body={"resources": [{"resource_id": crn}], "tag_names": tag_names},
        )

    # ---------------- Event Streams admin ----------------
    @staticmethod
    def _topics(admin_url: str, name: Optional[str] = None) -> str:
        base = f"{admin_url.rstrip('/')}/admin/topics"
        return f"{base}/{quote(name, safe='')}" if name else base

    def get_topic(self, admin_url: str, name: str) -> dict[str, Any]:
        return self._request("get_topic", "GET", self._topics(admin_url, name))

    def create_topic(self, admin_url: str, body: dict[str, Any]) -> None:
        self._request("create_topic", "POST", self._topics(admin_url), json_body=body)

    def update_topic(self, admin_url: str, name: str, body: dict[str, Any]) -> None:
        self._request("update_topic", "PATCH", self._topics(admin_url, name), json_body=body)

    def delete_topic(self, admin_url: str, name: str) -> None:
        self._request("delete_topic", "DELETE", self._topics(admin_url, name))


def _api_error(resp: requests.Response) -> IBMCloudAPIError:
    """Build an error whose message carries the status text and any ``errors`` payload."""
    message = f"{resp.status_code} {resp.reason or ''}".strip()
    errors: Any = None
    try:
        body = resp.json()
    except ValueError:
        body = None
    if isinstance(body, dict):
        errors = body.get("errors")
        detail = body.get("message") or body.get("error") or body.get("errorMessage")
        if detail:
            message = f"{message}: {detail}"
    if errors:
        message = f"{message}: {json.dumps(errors)}"
    elif body is None and resp.text:
        message = f"{message}: {resp.text[:200]}"
    return IBMCloudAPIError(resp.status_code, message, errors)
