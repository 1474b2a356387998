"""API infrastructure stack for the translation backend.

Contains:
- Lambda functions for translate, users and contingent endpoints
- API Gateway REST API with CORS
- Stage configuration for dev/prod
"""
from aws_cdk import CfnOutput, Duration, Stack
from aws_cdk import aws_apigateway as apigw
from aws_cdk import aws_lambda as lambda_
from aws_cdk import aws_ssm as ssm
from constructs import Construct

from .base_stack import LAMBDAS_DIR, TranslateBaseStack


class TranslateApiStack(Stack):
    """API infrastructure stack with Lambda functions and API Gateway."""

    def __init__(
        self,
        scope: Construct,
        construct_id: str,
        environment: str,
        base_stack: TranslateBaseStack,
        simulate_translation: bool = False,
        privileged_devices: str = "",
        **kwargs,
    ) -> None:
        """Initialize API stack.

        Args:
            scope: CDK scope
            construct_id: Stack identifier
            environment: Deployment environment (dev/prod)
            base_stack: Reference to base infrastructure stack
            simulate_translation: Deploy with provider calls bypassed
            privileged_devices: Comma-separated user_id:name pairs of privileged devices
            **kwargs: Additional stack properties
        """
        super().__init__(scope, construct_id, **kwargs)

        self.deploy_env = environment
        self.prefix = f"mlt-{environment}"
        self.base_stack = base_stack
        self.simulate_translation = simulate_translation
        self.privileged_devices = privileged_devices
        self.api_key_param_name = f"/mlt/{environment}/secrets/google_translate_api_key"

        # Create resources
        self.translate_function = self._create_function(
            "Translate", "translate.handler.lambda_handler", timeout_seconds=30
        )
        self.users_function = self._create_function("Users", "users.handler.lambda_handler")
        self.contingent_function = self._create_function(
            "Contingent", "contingent.handler.lambda_handler"
        )
        self._grant_api_key_read()
        self.api = self._create_api()

        # Export outputs
        self._create_outputs()

    def _environment_variables(self) -> dict[str, str]:
        """Deploy-time configuration shared by all functions."""
        return {
            "TABLE_NAME": self.base_stack.table.table_name,
            "ENVIRONMENT": self.deploy_env,
            "POWERTOOLS_SERVICE_NAME": "multi-lang-translate",
            "POWERTOOLS_LOG_LEVEL": "INFO" if self.deploy_env == "prod" else "DEBUG",
            "TRANSLATE_API_KEY_PARAM": self.api_key_param_name,
            "SIMULATE_TRANSLATION": "true" if self.simulate_translation else "false",
            "PRIVILEGED_DEVICES": self.privileged_devices,
        }

    def _create_function(
        self, name: str, handler: str, timeout_seconds: int = 10
    ) -> lambda_.Function:
        """Create a Lambda function with table access."""
        function = lambda_.Function(
            self,
            f"{name}Function",
            function_name=f"{self.prefix}-{name.lower()}",
            runtime=lambda_.Runtime.PYTHON_3_12,
            handler=handler,
            code=lambda_.Code.from_asset(
                str(LAMBDAS_DIR),
                exclude=["tests", "**/__pycache__", "requirements.txt"],
            ),
            layers=[self.base_stack.dependencies_layer],
            environment=self._environment_variables(),
            timeout=Duration.seconds(timeout_seconds),
            memory_size=256,
            tracing=lambda_.Tracing.ACTIVE,
        )
        self.base_stack.table.grant_read_write_data(function)
        return function

    def _grant_api_key_read(self) -> None:
        """Allow the translate function to read the provider API key."""
        parameter = ssm.StringParameter.from_secure_string_parameter_attributes(
            self,
            "TranslateApiKey",
            parameter_name=self.api_key_param_name,
        )
        parameter.grant_read(self.translate_function)

    def _create_api(self) -> apigw.RestApi:
        """Create API Gateway REST API with CORS configuration."""
        cors_origins = (
            ["https://mlt.app"]
            if self.deploy_env == "prod"
            else apigw.Cors.ALL_ORIGINS
        )

        api = apigw.RestApi(
            self,
            "Api",
            rest_api_name=f"{self.prefix}-api",
            description="Multi-language translation API",
            deploy_options=apigw.StageOptions(
                stage_name=self.deploy_env,
                throttling_rate_limit=50,
                throttling_burst_limit=100,
            ),
            default_cors_preflight_options=apigw.CorsOptions(
                allow_origins=cors_origins,
                allow_methods=apigw.Cors.ALL_METHODS,
                allow_headers=[
                    "Content-Type",
                    "Authorization",
                    "X-User-Id",
                ],
            ),
        )

        translate_integration = apigw.LambdaIntegration(self.translate_function)
        users_integration = apigw.LambdaIntegration(self.users_function)
        contingent_integration = apigw.LambdaIntegration(self.contingent_function)

        # /translate endpoint
        api.root.add_resource("translate").add_method("POST", translate_integration)

        # /users endpoints
        users = api.root.add_resource("users")
        users.add_method("POST", users_integration)
        users.add_resource("privileged-devices").add_method("POST", users_integration)

        # /contingent endpoints
        contingent = api.root.add_resource("contingent")
        contingent.add_resource("ensure").add_method("POST", contingent_integration)
        contingent.add_resource("status").add_method("GET", contingent_integration)

        # /statistics endpoint
        api.root.add_resource("statistics").add_method("GET", contingent_integration)

        return api

    def _create_outputs(self) -> None:
        """Create CloudFormation outputs."""
        CfnOutput(
            self,
            "ApiUrl",
            value=self.api.url,
            description="API Gateway URL",
            export_name=f"{self.prefix}-api-url",
        )

        CfnOutput(
            self,
            "ApiId",
            value=self.api.rest_api_id,
            description="API Gateway ID",
            export_name=f"{self.prefix}-api-id",
        )
