"""Router gateway client: API Gateway REST API resources, integrations and stages."""

import logging
from dataclasses import dataclass

from botocore.exceptions import ClientError

from lambdock.aws.errors import ApiNotFound, ErrorKind, IntegrationMissing, classify, error_message

logger = logging.getLogger(__name__)

ANY_METHOD = "ANY"
LAMBDA_INVOKE_API = "2015-03-31"


@dataclass
class ApiResource:
    """One node of a REST API resource tree."""

    id: str
    path: str
    path_part: str = ""
    parent_id: str | None = None
    has_method: bool = False
    integrated: bool = False

    @classmethod
    def from_item(cls, item: dict) -> "ApiResource":
        methods = item.get("resourceMethods") or {}
        return cls(
            id=item["id"],
            path=item["path"],
            path_part=item.get("pathPart", ""),
            parent_id=item.get("parentId"),
            has_method=ANY_METHOD in methods,
            integrated=any("methodIntegration" in m for m in methods.values()),
        )


def lambda_integration_uri(region: str, function_arn: str) -> str:
    return f"arn:aws:apigateway:{region}:lambda:path/{LAMBDA_INVOKE_API}/functions/{function_arn}/invocations"


def execute_api_arn(region: str, account_id: str, rest_api_id: str) -> str:
    """Source ARN matching every stage, method and path of one REST API."""
    return f"arn:aws:execute-api:{region}:{account_id}:{rest_api_id}/*"


def endpoint_url(rest_api_id: str, region: str, stage_name: str, version: str) -> str:
    """Public base URL of a version's routes on the deployed stage."""
    return f"https://{rest_api_id}.execute-api.{region}.amazonaws.com/{stage_name}/{version}"


class GatewayClient:
    """Thin wrapper over the API Gateway calls used by a deploy run."""

    def __init__(self, apigateway_client, dry_run=False):
        self._client = apigateway_client
        self.dry_run = dry_run

    def get_rest_api_id(self, name: str) -> str:
        """Find the pre-provisioned REST API by name. Raises ApiNotFound if absent."""
        paginator = self._client.get_paginator("get_rest_apis")
        for page in paginator.paginate():
            for item in page.get("items", []):
                if item.get("name") == name:
                    return item["id"]
        raise ApiNotFound(f"REST API '{name}' not found")

    def list_resources(self, rest_api_id: str) -> list[ApiResource]:
        """All resources of the API, with their methods embedded.

        get_resources has no server-side filtering, so every page is read.
        """
        paginator = self._client.get_paginator("get_resources")
        resources = []
        for page in paginator.paginate(restApiId=rest_api_id, embed=["methods"]):
            resources.extend(ApiResource.from_item(item) for item in page.get("items", []))
        return resources

    def stage_paths(self, rest_api_id: str, stage_name: str) -> set[str]:
        """Resource paths included in the stage's current deployment (empty if no stage)."""
        try:
            stage = self._client.get_stage(restApiId=rest_api_id, stageName=stage_name)
            deployment = self._client.get_deployment(
                restApiId=rest_api_id,
                deploymentId=stage["deploymentId"],
                embed=["apisummary"],
            )
        except ClientError as e:
            if classify(e) is ErrorKind.NOT_FOUND:
                return set()
            raise
        return set((deployment.get("apiSummary") or {}).keys())

    def create_resource(self, rest_api_id: str, parent_id: str, path_part: str) -> str:
        if self.dry_run:
            logger.info(f"[dry-run] create resource '{path_part}' under {parent_id}")
            return f"dry-run-{path_part}"
        response = self._client.create_resource(restApiId=rest_api_id, parentId=parent_id, pathPart=path_part)
        return response["id"]

    def put_method(self, rest_api_id: str, resource_id: str):
        """Accept any HTTP verb on the resource, unauthenticated."""
        if self.dry_run:
            logger.info(f"[dry-run] put method {ANY_METHOD} on {resource_id}")
            return
        self._client.put_method(
            restApiId=rest_api_id,
            resourceId=resource_id,
            httpMethod=ANY_METHOD,
            authorizationType="NONE",
        )

    def put_integration(self, rest_api_id: str, resource_id: str, uri: str, credentials: str):
        """Bind the resource's ANY method to a Lambda proxy integration."""
        if self.dry_run:
            logger.info(f"[dry-run] put integration on {resource_id} -> {uri}")
            return
        self._client.put_integration(
            restApiId=rest_api_id,
            resourceId=resource_id,
            httpMethod=ANY_METHOD,
            integrationHttpMethod="POST",
            type="AWS_PROXY",
            credentials=credentials,
            uri=uri,
        )

    def create_deployment(self, rest_api_id: str, stage_name: str):
        """Cut a stage deployment.

        Raises IntegrationMissing when the API contains a method without integration.
        """
        if self.dry_run:
            logger.info(f"[dry-run] create deployment of {rest_api_id} to stage '{stage_name}'")
            return
        try:
            self._client.create_deployment(restApiId=rest_api_id, stageName=stage_name)
        except ClientError as e:
            if classify(e) is ErrorKind.INTEGRATION_MISSING:
                raise IntegrationMissing(error_message(e)) from e
            raise

    def delete_resource(self, rest_api_id: str, resource_id: str):
        if self.dry_run:
            logger.info(f"[dry-run] delete resource {resource_id}")
            return
        self._client.delete_resource(restApiId=rest_api_id, resourceId=resource_id)
