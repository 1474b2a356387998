"""Base infrastructure stack for the translation backend.

Contains:
- DynamoDB table with single-table design (contingent, usage, identities)
- Lambda layer with third-party Python dependencies
"""
from pathlib import Path

from aws_cdk import CfnOutput, RemovalPolicy, Stack
from aws_cdk import aws_dynamodb as dynamodb
from aws_cdk import aws_lambda as lambda_
from constructs import Construct

LAMBDAS_DIR = Path(__file__).resolve().parents[2] / "lambdas"


class TranslateBaseStack(Stack):
    """Base infrastructure stack with DynamoDB and the dependency layer."""

    def __init__(
        self,
        scope: Construct,
        construct_id: str,
        environment: str = "dev",
        **kwargs,
    ) -> None:
        """Initialize base stack.

        Args:
            scope: CDK scope
            construct_id: Stack identifier
            environment: Deployment environment (dev/prod)
            **kwargs: Additional stack properties
        """
        super().__init__(scope, construct_id, **kwargs)

        self.deploy_env = environment
        self.prefix = f"mlt-{environment}"

        # Create resources
        self.table = self._create_table()
        self.dependencies_layer = self._create_lambda_layer()

        # Export outputs
        self._create_outputs()

    def _create_table(self) -> dynamodb.Table:
        """Create DynamoDB table with single-table design."""
        return dynamodb.Table(
            self,
            "MainTable",
            table_name=f"{self.prefix}-main",
            partition_key=dynamodb.Attribute(
                name="PK",
                type=dynamodb.AttributeType.STRING,
            ),
            sort_key=dynamodb.Attribute(
                name="SK",
                type=dynamodb.AttributeType.STRING,
            ),
            billing_mode=dynamodb.BillingMode.PAY_PER_REQUEST,
            removal_policy=(
                RemovalPolicy.RETAIN
                if self.deploy_env == "prod"
                else RemovalPolicy.DESTROY
            ),
            point_in_time_recovery=self.deploy_env == "prod",
        )

    def _create_lambda_layer(self) -> lambda_.LayerVersion:
        """Create Lambda layer for third-party Python dependencies."""
        return lambda_.LayerVersion(
            self,
            "DependenciesLayer",
            layer_version_name=f"{self.prefix}-dependencies",
            code=lambda_.Code.from_asset(
                str(LAMBDAS_DIR),
                bundling={
                    "image": lambda_.Runtime.PYTHON_3_12.bundling_image,
                    "command": [
                        "bash",
                        "-c",
                        "pip install -r requirements.txt -t /asset-output/python",
                    ],
                },
            ),
            compatible_runtimes=[lambda_.Runtime.PYTHON_3_12],
            description="Python dependencies for the translation backend",
        )

    def _create_outputs(self) -> None:
        """Create CloudFormation outputs."""
        CfnOutput(
            self,
            "TableName",
            value=self.table.table_name,
            description="DynamoDB table name",
            export_name=f"{self.prefix}-table-name",
        )

        CfnOutput(
            self,
            "TableArn",
            value=self.table.table_arn,
            description="DynamoDB table ARN",
            export_name=f"{self.prefix}-table-arn",
        )

        CfnOutput(
            self,
            "DependenciesLayerArn",
            value=self.dependencies_layer.layer_version_arn,
            description="Dependencies Lambda layer ARN",
            export_name=f"{self.prefix}-dependencies-layer-arn",
        )
