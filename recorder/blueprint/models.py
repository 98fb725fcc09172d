# recorder/blueprint/models.py
from __future__ import annotations
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field

from recorder.resources.descriptors import FileResource, LiteralResource, RegistryResource, UrlResource

__all__ = [
    "StepProgress",
    "InstallPluginStep",
    "InstallThemeStep",
    "SetSiteOptionsStep",
    "RunSqlStep",
    "UnzipStep",
    "WriteFileStep",
    "MkdirStep",
    "Step",
    "Blueprint",
]

# Wire names follow the Playground blueprint format, field for field.



class _WireModel(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)



class StepProgress(_WireModel):
    caption: str | None = None
    weight: int | None = None



class InstallPluginStep(_WireModel):
    step: Literal["installPlugin"] = "installPlugin"
    pluginZipFile: Annotated[Union[RegistryResource, UrlResource], Field(discriminator="resource")]
    progress: StepProgress | None = None



class InstallThemeStep(_WireModel):
    step: Literal["installTheme"] = "installTheme"
    themeZipFile: Annotated[Union[RegistryResource, UrlResource], Field(discriminator="resource")]
    progress: StepProgress | None = None



class SetSiteOptionsStep(_WireModel):
    step: Literal["setSiteOptions"] = "setSiteOptions"
    options: dict[str, Any] = Field(default_factory=dict)



class RunSqlStep(_WireModel):
    """Replays captured mutations. `sql.contents` is the replay script."""
    step: Literal["runSql"] = "runSql"
    sql: LiteralResource



class UnzipStep(_WireModel):
    step: Literal["unzip"] = "unzip"
    zipFile: FileResource
    extractToPath: str



class WriteFileStep(_WireModel):
    step: Literal["writeFile"] = "writeFile"
    path: str
    data: str



class MkdirStep(_WireModel):
    step: Literal["mkdir"] = "mkdir"
    path: str



Step = Annotated[
    Union[
        InstallPluginStep,
        InstallThemeStep,
        SetSiteOptionsStep,
        RunSqlStep,
        UnzipStep,
        WriteFileStep,
        MkdirStep,
    ],
    Field(discriminator="step"),
]



class Blueprint(_WireModel):
    """The installation manifest handed to Playground."""
    landingPage: str = "/wp-admin/"
    preferredVersions: dict[str, str] = Field(default_factory=dict)
    phpExtensionBundles: list[str] = Field(default_factory=lambda: ["kitchen-sink"])
    features: dict[str, bool] = Field(default_factory=lambda: {"networking": True})
    login: bool = True
    steps: list[Step] = Field(default_factory=list)

    def toDict(self) -> dict[str, Any]:
        return self.model_dump(mode="json", exclude_none=True)

    def toJson(self, *, pretty: bool = False) -> str:
        return self.model_dump_json(exclude_none=True, indent=4 if pretty else None)

    @classmethod
    def fromJson(cls, text: str | bytes) -> "Blueprint":
        return cls.model_validate_json(text)

    def withSteps(self, extraSteps: list[Any]) -> "Blueprint":
        """Returns a copy with `extraSteps` appended after the existing ones."""
        return self.model_copy(update={"steps": [*self.steps, *extraSteps]})
