"""Unit tests for GatewayClient against a mocked boto3 API Gateway client."""

from unittest.mock import MagicMock

import pytest
from botocore.exceptions import ClientError

from lambdock.aws.errors import ApiNotFound, IntegrationMissing
from lambdock.aws.gateway import ApiResource, GatewayClient, endpoint_url, execute_api_arn, lambda_integration_uri


def _client_error(code, message="", operation="Op"):
    return ClientError({"Error": {"Code": code, "Message": message}}, operation)


@pytest.fixture
def apigw():
    return MagicMock()


@pytest.fixture
def client(apigw):
    return GatewayClient(apigw)


def _paginate(apigw, pages):
    apigw.get_paginator.return_value.paginate.return_value = pages


def test_api_resource_from_item():
    item = {
        "id": "r2",
        "parentId": "r1",
        "pathPart": "{proxy+}",
        "path": "/v1/{proxy+}",
        "resourceMethods": {"ANY": {"httpMethod": "ANY", "methodIntegration": {"type": "AWS_PROXY"}}},
    }
    resource = ApiResource.from_item(item)
    assert resource.parent_id == "r1"
    assert resource.path_part == "{proxy+}"
    assert resource.has_method
    assert resource.integrated


def test_api_resource_method_without_integration():
    resource = ApiResource.from_item({"id": "r2", "path": "/v1/{proxy+}", "resourceMethods": {"ANY": {"httpMethod": "ANY"}}})
    assert resource.has_method
    assert not resource.integrated


def test_api_resource_root_item():
    resource = ApiResource.from_item({"id": "root", "path": "/"})
    assert resource.parent_id is None
    assert not resource.has_method


def test_urls():
    arn = "arn:aws:lambda:eu-west-1:123456789012:function:fn"
    assert lambda_integration_uri("eu-west-1", arn) == (
        f"arn:aws:apigateway:eu-west-1:lambda:path/2015-03-31/functions/{arn}/invocations"
    )
    assert endpoint_url("abc123", "eu-west-1", "staging", "0123456789abcd") == (
        "https://abc123.execute-api.eu-west-1.amazonaws.com/staging/0123456789abcd"
    )
    assert execute_api_arn("eu-west-1", "123456789012", "abc123") == "arn:aws:execute-api:eu-west-1:123456789012:abc123/*"


def test_get_rest_api_id_searches_all_pages(client, apigw):
    _paginate(apigw, [{"items": [{"id": "a", "name": "other"}]}, {"items": [{"id": "b", "name": "versioned-fn-gateway"}]}])
    assert client.get_rest_api_id("versioned-fn-gateway") == "b"
    apigw.get_paginator.assert_called_with("get_rest_apis")


def test_get_rest_api_id_missing(client, apigw):
    _paginate(apigw, [{"items": [{"id": "a", "name": "other"}]}])
    with pytest.raises(ApiNotFound, match="versioned-fn-gateway"):
        client.get_rest_api_id("versioned-fn-gateway")


def test_list_resources_embeds_methods(client, apigw):
    _paginate(
        apigw,
        [
            {"items": [{"id": "root", "path": "/"}]},
            {"items": [{"id": "r1", "parentId": "root", "pathPart": "v1", "path": "/v1"}]},
        ],
    )
    resources = client.list_resources("abc123")
    assert [r.path for r in resources] == ["/", "/v1"]
    apigw.get_paginator.return_value.paginate.assert_called_once_with(restApiId="abc123", embed=["methods"])


def test_stage_paths(client, apigw):
    apigw.get_stage.return_value = {"deploymentId": "dep1"}
    apigw.get_deployment.return_value = {"apiSummary": {"/v1/{proxy+}": {"ANY": {}}, "/": {}}}
    assert client.stage_paths("abc123", "staging") == {"/v1/{proxy+}", "/"}
    apigw.get_deployment.assert_called_once_with(restApiId="abc123", deploymentId="dep1", embed=["apisummary"])


def test_stage_paths_without_stage(client, apigw):
    apigw.get_stage.side_effect = _client_error("NotFoundException", "Invalid stage identifier specified", "GetStage")
    assert client.stage_paths("abc123", "staging") == set()


def test_put_integration_is_lambda_proxy(client, apigw):
    client.put_integration("abc123", "r2", "arn:uri", "arn:role")
    kwargs = apigw.put_integration.call_args.kwargs
    assert kwargs["type"] == "AWS_PROXY"
    assert kwargs["httpMethod"] == "ANY"
    assert kwargs["integrationHttpMethod"] == "POST"
    assert kwargs["credentials"] == "arn:role"
    assert kwargs["uri"] == "arn:uri"


def test_put_method_is_unauthenticated(client, apigw):
    client.put_method("abc123", "r2")
    apigw.put_method.assert_called_once_with(restApiId="abc123", resourceId="r2", httpMethod="ANY", authorizationType="NONE")


def test_create_resource_returns_id(client, apigw):
    apigw.create_resource.return_value = {"id": "new1"}
    assert client.create_resource("abc123", "root", "v1") == "new1"


def test_create_deployment_missing_integration(client, apigw):
    apigw.create_deployment.side_effect = _client_error(
        "BadRequestException", "No integration defined for method", "CreateDeployment"
    )
    with pytest.raises(IntegrationMissing):
        client.create_deployment("abc123", "staging")


def test_create_deployment_other_bad_request_propagates(client, apigw):
    apigw.create_deployment.side_effect = _client_error("BadRequestException", "Invalid stage name", "CreateDeployment")
    with pytest.raises(ClientError):
        client.create_deployment("abc123", "staging")


def test_dry_run_skips_mutations(apigw, caplog):
    client = GatewayClient(apigw, dry_run=True)
    with caplog.at_level("INFO"):
        resource_id = client.create_resource("abc123", "root", "v1")
        client.put_method("abc123", resource_id)
        client.put_integration("abc123", resource_id, "arn:uri", "arn:role")
        client.create_deployment("abc123", "staging")
        client.delete_resource("abc123", resource_id)

    apigw.create_resource.assert_not_called()
    apigw.put_method.assert_not_called()
    apigw.put_integration.assert_not_called()
    apigw.create_deployment.assert_not_called()
    apigw.delete_resource.assert_not_called()
    assert caplog.text.count("[dry-run]") == 5
