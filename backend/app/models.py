from pydantic import BaseModel, Field


class Participant(BaseModel):
    age: int
    genres: list[str] = Field(default_factory=list)


class GeneratePlaylistRequest(BaseModel):
    participants: list[Participant] = Field(default_factory=list)


class GeneratePlaylistResponse(BaseModel):
    playlist: list[str] = Field(default_factory=list)
