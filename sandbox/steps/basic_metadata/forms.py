"""Form builder for the metadata step."""

from console.forms import FormField, StepForm


def metadata_form(context, state):
    values = context.values
    return StepForm(
        title="Describe the object",
        fields=[
            FormField(
                name="label",
                label="Label",
                required=True,
                default=values.get("label", state.object.label),
            ),
            FormField(
                name="description",
                label="Description",
                default=values.get("description", ""),
            ),
        ],
    )
