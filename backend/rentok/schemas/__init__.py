# Schemas package init: pydantic request/response models, one module per resource
