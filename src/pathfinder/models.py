from pydantic import BaseModel, Field


class DefinitionRequest(BaseModel):
    uri: str = Field(description="file:// URI of the document")
    line: int = Field(ge=0, description="Zero-based line index")
    character: int = Field(ge=0, description="Zero-based character index")


class TextRange(BaseModel):
    start_line: int
    start_character: int
    end_line: int
    end_character: int


class DefinitionTarget(BaseModel):
    uri: str
    range: TextRange


class DefinitionResponse(BaseModel):
    targets: list[DefinitionTarget] = Field(default_factory=list)
