"""lambdock: content-addressed deploys of a Lambda handler behind API Gateway."""
